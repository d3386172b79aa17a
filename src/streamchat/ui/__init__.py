"""Terminal UI module for streamchat.

Provides a Textual-based TUI over a streaming chat session.

Module structure (each module hides a design decision):
- config.py: Display constants and log levels
- formatting.py: Segment-to-renderable mapping, timestamps, meta line
- widgets.py: Message views, input bar, log panel
- styles.py: CSS styling (layout decisions)
- app.py: Application orchestration (user interaction flow)
"""

from .app import StreamChatApp, run_textual_tui
from .config import LogLevel
from .formatting import format_meta, format_timestamp, render_segments
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MessageView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "MessageView",
    "StreamChatApp",
    "format_meta",
    "format_timestamp",
    "render_segments",
    "run_textual_tui",
]
