from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A message as sent to an LLM provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class StreamingResponse:
    """Async iterator over streamed text fragments.

    Token usage, when the provider reports it, arrives with the last event
    and is available on ``usage`` once iteration has finished::

        stream = await provider.chat_completion_stream(messages)
        async for fragment in stream:
            print(fragment, end="")
        print(stream.usage)
    """

    def __init__(self, fragments: AsyncIterator[str]):
        self._fragments = fragments
        self._usage: dict[str, int] | None = None

    @property
    def usage(self) -> dict[str, int] | None:
        return self._usage

    def set_usage(self, usage: dict[str, int]) -> None:
        self._usage = usage

    async def aclose(self) -> None:
        """Close the underlying generator, releasing the connection."""
        aclose: Any = getattr(self._fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        return await self._fragments.__anext__()
