"""Main CLI application using Typer."""
import asyncio
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from ..segments import CodeBlock, InlineCode, classify
from ..transcript import Message, Role
from ..ui.formatting import format_meta, render_segments
from .providers import require_session

load_dotenv()

app = typer.Typer(
    name="streamchat",
    help="Streaming chat client with live code-fence rendering",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()

PREVIEW_LENGTH = 60


@app.command(name="tui")
def tui_command(
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Chat model (default: from environment)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
    highlight: bool = typer.Option(
        False,
        "--highlight",
        help="Start with syntax-highlighted answers requested"
    ),
):
    """Launch the interactive chat TUI."""
    from ..ui import run_textual_tui

    session = require_session(model, console)
    asyncio.run(run_textual_tui(session, log_level=log_level, highlight_syntax=highlight))


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Chat model (default: from environment)"
    ),
    highlight: bool = typer.Option(
        False,
        "--highlight",
        help="Ask for language-tagged code blocks"
    ),
):
    """Stream a single answer to the terminal. Ctrl+C keeps the partial answer."""
    session = require_session(model, console)

    async def _ask() -> None:
        async with session:
            with Live(console=console, refresh_per_second=12, vertical_overflow="visible") as live:
                def on_update(message: Message | None) -> None:
                    if message is not None and message.role == Role.ASSISTANT:
                        live.update(render_segments(message.segments))

                session.set_update_callback(on_update)
                try:
                    await session.submit_prompt(prompt, highlight_syntax=highlight)
                finally:
                    session.set_update_callback(None)
                    last = session.transcript.last
                    if last is not None and last.role == Role.ASSISTANT:
                        live.update(render_segments(last.segments))

    interrupted = False
    try:
        asyncio.run(_ask())
    except KeyboardInterrupt:
        interrupted = True

    message = session.transcript.last
    if interrupted and message is not None and message.loading:
        # The loop stopped before the stream task saw its cancellation
        session.transcript.cancel()

    if message is not None and message.role == Role.ASSISTANT:
        meta = format_meta(message)
        if meta:
            console.print(Text(meta, style="dim"))

    if interrupted:
        console.print("[yellow]Cancelled.[/yellow]")
        raise typer.Exit(code=130)
    if message is not None and message.meta.error:
        raise typer.Exit(code=1)


@app.command()
def segments(
    path: Path | None = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        help="File to classify (reads stdin when omitted)"
    ),
    render: bool = typer.Option(
        False,
        "--render",
        "-r",
        help="Render the segments instead of listing them"
    ),
):
    """Classify text into plain, code-block and inline-code segments."""
    text = path.read_text(encoding="utf-8") if path is not None else sys.stdin.read()
    result = classify(text)

    if render:
        console.print(render_segments(result))
        return

    table = Table(title=f"{len(result)} segment(s)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Language", style="magenta")
    table.add_column("Closed", style="green")
    table.add_column("Text")

    for index, segment in enumerate(result):
        if isinstance(segment, CodeBlock):
            body = segment.code
            language = segment.language or "-"
            closed = "yes" if segment.terminated else "no"
        else:
            body = segment.text
            language = ""
            closed = ("yes" if segment.terminated else "no") if isinstance(segment, InlineCode) else ""
        preview = body if len(body) <= PREVIEW_LENGTH else body[:PREVIEW_LENGTH] + "..."
        table.add_row(str(index), segment.kind, language, closed, Text(repr(preview)))

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
