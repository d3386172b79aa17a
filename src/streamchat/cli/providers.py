"""Provider factory for CLI commands.

Centralizes creation of the chat session from environment variables.
"""

import os

import typer
from rich.console import Console

from ..session import ChatSession

_console = Console()

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"


def get_session(model: str | None = None, console: Console | None = None) -> ChatSession | None:
    """Create a chat session from environment variables.

    Args:
        model: Model override; falls back to the provider's configured model
        console: Optional Rich console for output

    Returns:
        ChatSession, or None if the provider is not configured

    Environment variables:
        LLM_PROVIDER: Provider type (openai, deepseek; default: openai)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-3.5-turbo)
        OPENAI_BASE_URL: Optional OpenAI-compatible endpoint
        DEEPSEEK_API_KEY: DeepSeek API key (for deepseek provider)
    """
    con = console or _console
    llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()

    if llm_provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set[/yellow]")
            return None
        config = {}
        base_url = os.getenv("OPENAI_BASE_URL")
        if base_url:
            config["base_url"] = base_url
        return ChatSession.from_credentials(
            model or os.getenv("OPENAI_CHAT_MODEL", DEFAULT_OPENAI_MODEL),
            api_key,
            provider="openai",
            **config,
        )

    if llm_provider == "deepseek":
        api_key = os.getenv("DEEPSEEK_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: DEEPSEEK_API_KEY not set[/yellow]")
            return None
        return ChatSession.from_credentials(model or DEFAULT_DEEPSEEK_MODEL, api_key, provider="deepseek")

    con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
    return None


def require_session(model: str | None = None, console: Console | None = None) -> ChatSession:
    """Get a chat session, exiting if no provider is configured.

    Raises:
        typer.Exit: If the LLM provider is not configured
    """
    con = console or _console
    session = get_session(model, con)
    if session is None:
        con.print("[red]Error: LLM provider not configured[/red]")
        raise typer.Exit(code=1)
    return session
