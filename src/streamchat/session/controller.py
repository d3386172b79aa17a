"""Streaming session controller.

Owns the live stream for the assistant message being generated and feeds
its fragments into the transcript. All transcript mutations happen on the
event loop thread, one reaction at a time, so no locking is needed.
"""

import asyncio
import contextlib
import time
from collections.abc import Callable
from typing import Any

from ..llm import ChatMessage, LLMProvider, create_llm_provider
from ..prompts import with_syntax_highlighting
from ..transcript import Message, Role, SequencingError, TranscriptStore

UpdateCallback = Callable[[Message | None], None]
DebugCallback = Callable[[str, str, str], None]


class ChatSession:
    """Runs streaming exchanges against an LLM provider.

    The transcript doubles as the conversational context: every request sends
    all finalized messages, and ``reset`` forgets them.
    """

    def __init__(
        self,
        llm: LLMProvider,
        model: str | None = None,
        store: TranscriptStore | None = None,
        temperature: float = 0.7,
    ) -> None:
        self._llm = llm
        self._model = model or llm.model
        self._store = store if store is not None else TranscriptStore()
        self._temperature = temperature
        self._stream_task: asyncio.Task | None = None
        self._cancel_requested = False
        self._update_callback: UpdateCallback | None = None
        self._debug_callback: DebugCallback | None = None

    @classmethod
    def from_credentials(
        cls,
        model: str,
        api_key: str,
        provider: str = "openai",
        **config: Any
    ) -> "ChatSession":
        """Build a session and its provider from a model name and API key."""
        llm = create_llm_provider(provider, api_key=api_key, model=model, **config)
        return cls(llm, model=model)

    @property
    def model(self) -> str:
        return self._model

    @property
    def transcript(self) -> TranscriptStore:
        return self._store

    @property
    def is_loading(self) -> bool:
        """True while an assistant message is streaming."""
        return self._store.is_loading

    def set_update_callback(self, callback: UpdateCallback | None) -> None:
        """Set the callback fired after every transcript change.

        Args:
            callback: Callable receiving the changed message, or None when
                the whole transcript was cleared
        """
        self._update_callback = callback

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback for execution tracing.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def _notify(self, message: Message | None) -> None:
        if self._update_callback:
            self._update_callback(message)

    async def submit(self, messages: list[ChatMessage]) -> Message:
        """Append user messages and stream the assistant's answer.

        Returns once the answer is finalized, cancelled through ``close``,
        or ended by a transport error.

        Args:
            messages: New user messages for this exchange

        Returns:
            The assistant message, no longer loading

        Raises:
            SequencingError: If a previous answer is still streaming
            ValueError: If a message is not from the user
        """
        if self.is_loading:
            raise SequencingError("submit", "a response is still streaming")
        for message in messages:
            if message.role != Role.USER.value:
                raise ValueError(f"Only user messages can be submitted, got role '{message.role}'")

        for message in messages:
            self._notify(self._store.append_user_message(message.content))

        history = self._store.history()
        assistant = self._store.begin_assistant_message()
        self._notify(assistant)
        self._debug("info", "Session", f"Streaming from {self._model} with {len(history)} message(s) of context")

        started = time.perf_counter()
        self._cancel_requested = False
        task = asyncio.create_task(self._stream_into(assistant, history, started))
        self._stream_task = task
        try:
            await task
        except asyncio.CancelledError:
            if not self._cancel_requested:
                self._abandon(assistant, started)
                raise
        finally:
            if self._stream_task is task:
                self._stream_task = None
        self._abandon(assistant, started)
        return assistant

    async def submit_prompt(self, prompt: str, highlight_syntax: bool = False) -> Message:
        """Submit a single user prompt.

        Args:
            prompt: Text typed by the user
            highlight_syntax: Ask the model for language-tagged code fences
        """
        content = with_syntax_highlighting(prompt) if highlight_syntax else prompt
        return await self.submit([ChatMessage(role=Role.USER.value, content=content)])

    async def _stream_into(self, message: Message, history: list[ChatMessage], started: float) -> None:
        try:
            stream = await self._llm.chat_completion_stream(
                history,
                model=self._model,
                temperature=self._temperature,
            )
            try:
                async for fragment in stream:
                    self._store.append_chunk(fragment)
                    self._notify(message)
            finally:
                await stream.aclose()
        except asyncio.CancelledError:
            self._abandon(message, started)
            raise
        except SequencingError as e:
            # Transcript changed under the stream; drop the exchange, keep the transcript
            self._debug("error", "Transcript", f"Exchange aborted: {e}")
            return
        except Exception as e:
            elapsed = time.perf_counter() - started
            self._debug("error", "LLM", f"Stream failed after {len(message.meta.chunks)} chunk(s): {e}")
            self._store.finalize(elapsed, error=str(e))
            self._notify(message)
            return

        elapsed = time.perf_counter() - started
        self._store.finalize(elapsed)
        self._debug("info", "Session", f"Response complete: {len(message.meta.chunks)} chunk(s) in {elapsed:.2f}s")
        if stream.usage:
            self._debug("debug", "LLM", f"Usage: {stream.usage}")
        self._notify(message)

    def _abandon(self, message: Message, started: float) -> None:
        """Mark ``message`` cancelled if it is still the loading message."""
        if self._store.loading_message is not message:
            return
        self._store.cancel(time.perf_counter() - started)
        self._debug("warning", "Session", f"Stream cancelled after {len(message.meta.chunks)} chunk(s)")
        self._notify(message)

    async def close(self) -> bool:
        """Stop the active stream, keeping the partial answer.

        Returns:
            True if a stream was running and has been cancelled
        """
        task = self._stream_task
        if task is None or task.done():
            return False
        self._cancel_requested = True
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        loading = self._store.loading_message
        if loading is not None:
            self._store.cancel()
            self._notify(loading)
        return True

    async def reset(self) -> None:
        """Cancel any active stream and clear the transcript."""
        await self.close()
        self._store.reset()
        self._debug("info", "Session", "Transcript reset")
        self._notify(None)

    async def aclose(self) -> None:
        """Cancel any active stream and release the provider."""
        await self.close()
        await self._llm.close()

    async def __aenter__(self) -> "ChatSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
