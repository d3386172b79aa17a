"""Data models for the chat transcript.

These models describe messages and their streaming metadata independently
of how they are rendered or where the text comes from.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..llm.models import ChatMessage
from ..segments import Segment, classify


class Role(str, Enum):
    """Author of a transcript message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageMeta(BaseModel):
    """Streaming state of a message."""

    loading: bool = Field(default=False, description="True while the stream is still open")
    chunks: list[str] = Field(default_factory=list, description="Raw fragments in arrival order")
    response_time: float | None = Field(
        default=None,
        description="Seconds from stream start to stream end; None while loading"
    )
    cancelled: bool = Field(default=False, description="Stream was stopped by the user")
    error: str | None = Field(default=None, description="Transport error that ended the stream")


class Message(BaseModel):
    """A single transcript entry.

    Only the transcript store mutates ``content`` and ``meta``; everything
    else should treat a message as read-only.
    """

    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    meta: MessageMeta = Field(default_factory=MessageMeta)

    @property
    def loading(self) -> bool:
        return self.meta.loading

    @property
    def segments(self) -> list[Segment]:
        """Classify the current content from scratch."""
        return classify(self.content)

    def to_chat_message(self) -> ChatMessage:
        """Convert to the provider-facing message format."""
        return ChatMessage(role=self.role.value, content=self.content)
