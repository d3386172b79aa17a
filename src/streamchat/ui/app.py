"""Main Textual TUI application.

Wires the chat session to the widgets and handles user interaction.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..session import ChatSession
from ..transcript import Message, SequencingError
from .config import LogLevel
from .styles import APP_CSS
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel


class StreamChatApp(App):
    """Textual TUI for streaming chat."""

    CSS = APP_CSS
    TITLE = "streamchat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "cancel_stream", "Abort"),
        Binding("ctrl+k", "reset_chat", "Reset"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        session: ChatSession,
        log_level: str | None = None,
        highlight_syntax: bool = False,
    ) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._highlight_syntax = highlight_syntax

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        yield ChatInputBar(id="chat-input-bar", highlight_syntax=self._highlight_syntax)
        yield Footer()

    def on_mount(self) -> None:
        self.theme = "catppuccin-mocha"
        self.sub_title = self._session.model

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self._session.set_debug_callback(log_panel.route)
        self._session.set_update_callback(self._on_transcript_changed)
        for message in self._session.transcript:
            self._on_transcript_changed(message)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _on_transcript_changed(self, message: Message | None) -> None:
        """Session update callback: runs on every transcript mutation."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        if message is None:
            chat.clear_history()
        else:
            chat.update_message(message)
        self.query_one("#chat-input-bar", ChatInputBar).set_loading(self._session.is_loading)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        if self._session.is_loading:
            self.notify("Wait for the current answer or abort it", severity="warning", timeout=3)
            return
        self._run_exchange(event.value, event.highlight_syntax)

    @work(exclusive=True, group="exchange")
    async def _run_exchange(self, prompt: str, highlight_syntax: bool) -> None:
        """Stream one answer as a background async worker."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        log_panel.info("TUI", f"Submitting: '{prompt[:50]}'")
        try:
            message = await self._session.submit_prompt(prompt, highlight_syntax=highlight_syntax)
        except asyncio.CancelledError:
            log_panel.warning("TUI", "Exchange worker cancelled")
            raise
        except SequencingError as e:
            log_panel.error("Transcript", str(e))
            self.notify(str(e), severity="warning", timeout=3)
            return
        except Exception as e:
            log_panel.error("TUI", f"Exception: {e}")
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)
            return

        if message.meta.error:
            self.notify(f"Stream failed: {message.meta.error[:50]}", severity="error", timeout=5)
        elif message.meta.cancelled:
            self.notify("Cancelled", severity="warning", timeout=2)

    async def on_chat_input_bar_abort_requested(self, event: ChatInputBar.AbortRequested) -> None:
        await self.action_cancel_stream()

    async def on_chat_input_bar_reset_requested(self, event: ChatInputBar.ResetRequested) -> None:
        await self.action_reset_chat()

    async def action_cancel_stream(self) -> None:
        """Stop the running answer, keeping what has arrived."""
        if await self._session.close():
            self.notify("Cancelled", severity="warning", timeout=2)

    async def action_reset_chat(self) -> None:
        """Reset the conversation context."""
        if self._session.is_loading:
            self.notify("Abort the running answer before resetting", severity="warning", timeout=3)
            return
        await self._session.reset()
        self.notify("Chat reset", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    session: ChatSession,
    log_level: str | None = None,
    highlight_syntax: bool = False,
) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session to drive
        log_level: Log level for panel (debug/info/warning/error), None to hide
        highlight_syntax: Start with the syntax-highlighting request enabled
    """
    app = StreamChatApp(session, log_level=log_level, highlight_syntax=highlight_syntax)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await session.aclose()
