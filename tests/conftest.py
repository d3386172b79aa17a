"""Pytest configuration and shared fixtures."""
import asyncio
from typing import Any

import pytest

from streamchat.llm import ChatMessage, LLMProvider, StreamingResponse
from streamchat.transcript import TranscriptStore


class FakeProvider(LLMProvider):
    """In-memory provider that streams a fixed list of fragments."""

    def __init__(
        self,
        fragments: list[str],
        delay: float = 0.0,
        fail_after: int | None = None,
        fail_with: BaseException | None = None,
        usage: dict[str, int] | None = None,
        model: str = "fake-model",
    ) -> None:
        self.fragments = fragments
        self.delay = delay
        self.fail_after = fail_after
        self.fail_with = fail_with or ConnectionError("connection reset")
        self.usage = usage
        self.requests: list[list[ChatMessage]] = []
        self.closed = False
        self.stream_closed = False
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        self.requests.append(list(messages))
        response = StreamingResponse(self._generate(lambda usage: response.set_usage(usage)))
        return response

    async def _generate(self, on_usage):
        self.stream_closed = False
        try:
            for index, fragment in enumerate(self.fragments):
                if self.fail_after is not None and index == self.fail_after:
                    raise self.fail_with
                await asyncio.sleep(self.delay)
                yield fragment
            if self.usage is not None:
                on_usage(self.usage)
        finally:
            self.stream_closed = True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def store():
    """Return an empty transcript store."""
    return TranscriptStore()


@pytest.fixture
def fake_provider():
    """Return a provider streaming a short answer with a code block."""
    return FakeProvider(["Here:", "```py\n", "print(1)", "\n```", " done"])


@pytest.fixture
def slow_provider():
    """Return a provider that streams slowly enough to be cancelled."""
    return FakeProvider([f"word{i} " for i in range(200)], delay=0.01)


@pytest.fixture
def debug_log():
    """Collect debug callback entries as (level, component, message)."""
    entries: list[tuple[str, str, str]] = []

    def callback(level: str, component: str, message: str) -> None:
        entries.append((level, component, message))

    callback.entries = entries
    return callback


@pytest.fixture
def make_provider():
    """Return the fake provider class for custom fragment lists."""
    return FakeProvider
