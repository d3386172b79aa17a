"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Message rendering and live refresh while streaming
- Input bar controls and the ctrl+j submit shortcut
- Log rendering and level filtering
"""

from datetime import datetime

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Checkbox, RichLog, Static, TextArea

from ..transcript import Message, Role
from .config import (
    ASSISTANT_LABEL,
    EMPTY_TRANSCRIPT_TEXT,
    LOG_TIMESTAMP_FORMAT,
    USER_LABEL,
    LogLevel,
)
from .formatting import format_meta, render_segments


class MessageView(Vertical):
    """One transcript message: header, rendered segments, meta line.

    ``refresh_message`` re-classifies the full content every time it is
    called. Clicking the message copies its raw content.
    """

    def __init__(self, message: Message, *args, **kwargs) -> None:
        role_class = "user-message" if message.role == Role.USER else "assistant-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self.message = message

    def compose(self) -> ComposeResult:
        label = USER_LABEL if self.message.role == Role.USER else ASSISTANT_LABEL
        icon = ">" if self.message.role == Role.USER else "<"
        yield Static(f"{icon} {label}", classes="message-header")
        yield Static(classes="message-content")
        yield Static(classes="message-meta")

    def on_mount(self) -> None:
        self.refresh_message()

    def refresh_message(self) -> None:
        """Re-render content and meta from the current message state."""
        try:
            body = self.query_one(".message-content", Static)
        except NoMatches:
            # Not composed yet; on_mount renders the latest state
            return
        if self.message.role == Role.USER:
            body.update(Text(self.message.content))
        else:
            body.update(render_segments(self.message.segments))

        meta = self.query_one(".message-meta", Static)
        meta_text = format_meta(self.message)
        meta.update(Text(meta_text or ""))
        meta.display = meta_text is not None
        self.set_class(self.message.meta.loading, "loading")

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self.message.content)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript view.

    Keeps one MessageView per transcript message and shows a placeholder
    while the transcript is empty.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[int, MessageView] = {}

    def compose(self) -> ComposeResult:
        yield Static(EMPTY_TRANSCRIPT_TEXT, id="empty-transcript")

    def update_message(self, message: Message) -> None:
        """Render a new message or refresh one already shown."""
        view = self._views.get(id(message))
        if view is None:
            view = MessageView(message)
            self._views[id(message)] = view
            self.query_one("#empty-transcript", Static).display = False
            self.mount(view)
        else:
            view.refresh_message()
        self.border_subtitle = f"{len(self._views)} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the content of the last assistant message."""
        for view in reversed(list(self._views.values())):
            if view.message.role == Role.ASSISTANT:
                return view.message.content
        return None

    def clear_history(self) -> None:
        """Remove all messages and show the placeholder again."""
        for view in self._views.values():
            view.remove()
        self._views.clear()
        self.query_one("#empty-transcript", Static).display = True
        self.border_subtitle = "Conversation history"


class ChatInputBar(Horizontal):
    """Prompt input with Send, Reset and Abort controls."""

    class Submitted(TextualMessage):
        """Posted when the user submits a prompt."""

        def __init__(self, value: str, highlight_syntax: bool) -> None:
            super().__init__()
            self.value = value
            self.highlight_syntax = highlight_syntax

    class ResetRequested(TextualMessage):
        """Posted when the user asks to reset the conversation."""

    class AbortRequested(TextualMessage):
        """Posted when the user asks to stop the running answer."""

    def __init__(self, *args, highlight_syntax: bool = False, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._highlight_syntax = highlight_syntax

    def compose(self) -> ComposeResult:
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        with Vertical(id="input-controls"):
            yield Button("Send", id="send-btn", variant="success").with_tooltip(
                "Submit message (Ctrl+J)"
            )
            yield Button("Reset", id="reset-btn", variant="default").with_tooltip(
                "Reset conversation context (Ctrl+K)"
            )
            yield Button("Abort", id="abort-btn", variant="error", disabled=True).with_tooltip(
                "Stop the running answer (Esc)"
            )
            yield Checkbox("Syntax highlighting", self._highlight_syntax, id="highlight-toggle")

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "send-btn":
            self._submit()
        elif event.button.id == "reset-btn":
            self.post_message(self.ResetRequested())
        elif event.button.id == "abort-btn":
            self.post_message(self.AbortRequested())

    def on_key(self, event) -> None:
        """Submit on ctrl+j.

        Terminals do not report modifiers on Enter, so Enter keeps inserting
        line breaks.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()

    def _submit(self) -> None:
        if self.query_one("#send-btn", Button).disabled:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        text_area.text = ""
        highlight = self.query_one("#highlight-toggle", Checkbox).value
        self.post_message(self.Submitted(value, highlight))

    def set_loading(self, loading: bool) -> None:
        """Enable Abort while an answer streams; Send and Reset otherwise."""
        self.query_one("#send-btn", Button).disabled = loading
        self.query_one("#reset-btn", Button).disabled = loading
        self.query_one("#abort-btn", Button).disabled = not loading

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class DebugPanel(RichLog):
    """Log panel for execution tracing with level filtering.

    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Session": "green",
        "LLM": "magenta",
        "Transcript": "bright_yellow",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level
        self.display = False

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")
        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] {escape(message)}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.ERROR)

    def route(self, level: str, component: str, message: str) -> None:
        """Debug callback entry point: ``level`` is a name such as 'info'."""
        self.log_entry(component, message, LogLevel.from_string(level))

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
