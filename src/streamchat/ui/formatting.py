"""Segment rendering and text formatting.

Hides how classified segments become Rich renderables. Both the TUI and the
plain terminal output of the CLI render through this module.
"""

from datetime import datetime

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from ..segments import CodeBlock, InlineCode, PlainText, Segment
from ..transcript import Message, Role
from .config import (
    CODE_THEME,
    INLINE_CODE_STYLE,
    MESSAGE_TIMESTAMP_FORMAT,
    PLAIN_CODE_LEXER,
    STREAMING_LABEL,
)


def render_code_block(block: CodeBlock, theme: str = CODE_THEME) -> Panel:
    """Render a code block as a highlighted panel.

    Blocks without a detected language use a plain lexer. Open blocks are
    marked as still streaming.
    """
    syntax = Syntax(
        block.code,
        block.language or PLAIN_CODE_LEXER,
        theme=theme,
        word_wrap=True,
    )
    return Panel(
        syntax,
        title=block.language or "code",
        title_align="left",
        subtitle=None if block.terminated else STREAMING_LABEL,
        subtitle_align="right",
        border_style="dim",
    )


def render_segments(segments: list[Segment], theme: str = CODE_THEME) -> Group:
    """Render segments in order.

    Plain text and inline code flow together into one Text; each code block
    breaks the flow with its own panel. Empty text is skipped.
    """
    renderables: list[RenderableType] = []
    text = Text(overflow="fold")
    after_block = False

    for segment in segments:
        if isinstance(segment, CodeBlock):
            text.rstrip()
            if text.plain:
                renderables.append(text)
            renderables.append(render_code_block(segment, theme))
            text = Text(overflow="fold")
            after_block = True
            continue

        content = segment.text
        if after_block:
            # The line break after a closing fence belongs to the fence
            content = content.removeprefix("\n")
            after_block = not content
        if isinstance(segment, InlineCode):
            text.append(content, style=INLINE_CODE_STYLE)
        elif isinstance(segment, PlainText):
            text.append(content)

    if text.plain:
        renderables.append(text)
    return Group(*renderables)


def format_timestamp(moment: datetime) -> str:
    """Format a message timestamp as dd.mm.yyyy, HH:MM:SS."""
    return moment.strftime(MESSAGE_TIMESTAMP_FORMAT)


def format_meta(message: Message) -> str | None:
    """Build the metadata line shown under a finished message.

    Returns:
        None while the message is still loading
    """
    if message.meta.loading:
        return None

    parts = [f"Time: {format_timestamp(message.timestamp)}"]
    if message.role == Role.ASSISTANT:
        parts.append(f"Tokens: {len(message.meta.chunks)}")
        if message.meta.response_time is not None:
            parts.append(f"Response time: {message.meta.response_time:.2f}s")
        if message.meta.cancelled:
            parts.append("Cancelled")
        if message.meta.error:
            parts.append(f"Error: {message.meta.error}")
    return "  |  ".join(parts)
