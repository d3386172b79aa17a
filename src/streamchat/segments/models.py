"""Segment types produced by the classifier.

Segments are derived views over a message's text. They are rebuilt on every
classification pass and never persisted.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

FENCE = "```"
BACKTICK = "`"


class PlainText(BaseModel):
    """Text outside any fence or inline code span."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    text: str = Field(description="Text as it appears in the message")

    @property
    def source(self) -> str:
        return self.text


class CodeBlock(BaseModel):
    """Fenced code region, possibly still open while the message streams."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["code_block"] = "code_block"
    language: str | None = Field(default=None, description="Detected language tag")
    code: str = Field(description="Code to display (language tag stripped)")
    raw: str = Field(description="Exact text between the fences")
    terminated: bool = Field(default=True, description="Whether the closing fence has arrived")

    @property
    def source(self) -> str:
        """The slice of the message this block was read from, fences included."""
        return FENCE + self.raw + (FENCE if self.terminated else "")


class InlineCode(BaseModel):
    """Single-backtick code span inside plain text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_code"] = "inline_code"
    text: str
    terminated: bool = True

    @property
    def source(self) -> str:
        return BACKTICK + self.text + (BACKTICK if self.terminated else "")


Segment = Annotated[PlainText | CodeBlock | InlineCode, Field(discriminator="kind")]
