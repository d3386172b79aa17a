"""Tests for the streaming session controller."""
import asyncio

import pytest

from streamchat.llm import ChatMessage
from streamchat.prompts import load_prompt
from streamchat.segments import CodeBlock, PlainText
from streamchat.session import ChatSession
from streamchat.transcript import Role, SequencingError


async def wait_for_chunks(session: ChatSession, count: int) -> None:
    """Wait until the loading message has received ``count`` chunks."""
    for _ in range(500):
        loading = session.transcript.loading_message
        if loading is not None and len(loading.meta.chunks) >= count:
            return
        await asyncio.sleep(0.005)
    raise AssertionError(f"stream never reached {count} chunk(s)")


class TestSubmit:
    """Tests for a full streaming exchange."""

    @pytest.mark.asyncio
    async def test_submit_collects_chunks(self, fake_provider):
        """Test that every fragment lands in the assistant message in order."""
        session = ChatSession(fake_provider)

        message = await session.submit_prompt("show me")

        assert message.role == Role.ASSISTANT
        assert not message.loading
        assert message.meta.chunks == ["Here:", "```py\n", "print(1)", "\n```", " done"]
        assert message.content == "Here:```py\nprint(1)\n``` done"
        assert message.meta.response_time is not None
        assert not message.meta.cancelled
        assert not session.is_loading

    @pytest.mark.asyncio
    async def test_finished_message_classifies(self, fake_provider):
        """Test that the finished answer splits into text and a tagged block."""
        session = ChatSession(fake_provider)

        message = await session.submit_prompt("show me")

        assert message.segments == [
            PlainText(text="Here:"),
            CodeBlock(language="py", code="print(1)", raw="py\nprint(1)\n"),
            PlainText(text=" done"),
        ]

    @pytest.mark.asyncio
    async def test_transcript_order(self, fake_provider):
        """Test that the user message precedes the assistant message."""
        session = ChatSession(fake_provider)

        await session.submit_prompt("first")

        roles = [message.role for message in session.transcript]
        assert roles == [Role.USER, Role.ASSISTANT]

    @pytest.mark.asyncio
    async def test_history_sent_on_each_request(self, make_provider):
        """Test that the whole finalized transcript is sent as context."""
        provider = make_provider(["ok"])
        session = ChatSession(provider)

        await session.submit_prompt("one")
        await session.submit_prompt("two")

        assert [m.content for m in provider.requests[0]] == ["one"]
        assert [(m.role, m.content) for m in provider.requests[1]] == [
            ("user", "one"),
            ("assistant", "ok"),
            ("user", "two"),
        ]

    @pytest.mark.asyncio
    async def test_submit_several_user_messages(self, make_provider):
        """Test that a batch of user messages is appended in order."""
        provider = make_provider(["ok"])
        session = ChatSession(provider)

        await session.submit([
            ChatMessage(role="user", content="a"),
            ChatMessage(role="user", content="b"),
        ])

        assert [m.content for m in session.transcript] == ["a", "b", "ok"]

    @pytest.mark.asyncio
    async def test_submit_rejects_non_user_roles(self, make_provider):
        """Test that only user messages may be submitted."""
        session = ChatSession(make_provider(["ok"]))

        with pytest.raises(ValueError, match="assistant"):
            await session.submit([ChatMessage(role="assistant", content="fake")])
        assert len(session.transcript) == 0

    @pytest.mark.asyncio
    async def test_submit_prompt_with_highlighting(self, make_provider):
        """Test that highlighting appends the fence instruction to the prompt."""
        provider = make_provider(["ok"])
        session = ChatSession(provider)

        await session.submit_prompt("explain", highlight_syntax=True)

        sent = provider.requests[0][-1].content
        assert sent == f"explain {load_prompt('syntax_highlighting')}"
        assert "triple backticks" in sent

    @pytest.mark.asyncio
    async def test_model_defaults_to_provider(self, make_provider):
        """Test that the session falls back to the provider's model."""
        assert ChatSession(make_provider([])).model == "fake-model"
        assert ChatSession(make_provider([]), model="other").model == "other"

    @pytest.mark.asyncio
    async def test_empty_stream(self, make_provider):
        """Test that a stream with no fragments still finalizes."""
        session = ChatSession(make_provider([]))

        message = await session.submit_prompt("hello?")

        assert message.content == ""
        assert not message.loading
        # Empty answers are not sent back as context
        assert [m.content for m in session.transcript.history()] == ["hello?"]


class TestCallbacks:
    """Tests for update and debug callbacks."""

    @pytest.mark.asyncio
    async def test_update_callback_fires_per_chunk(self, make_provider):
        """Test that every transcript change is reported."""
        session = ChatSession(make_provider(["a", "b", "c"]))
        seen: list[str] = []
        session.set_update_callback(lambda message: seen.append(message.content))

        await session.submit_prompt("go")

        # user message, empty assistant, three chunks, finalize
        assert seen == ["go", "", "a", "ab", "abc", "abc"]

    @pytest.mark.asyncio
    async def test_debug_callback_reports_usage(self, make_provider, debug_log):
        """Test that completion and token usage are traced."""
        session = ChatSession(make_provider(["x"], usage={"total_tokens": 5}))
        session.set_debug_callback(debug_log)

        await session.submit_prompt("go")

        levels = [entry[0] for entry in debug_log.entries]
        assert "info" in levels
        assert any("Usage" in entry[2] for entry in debug_log.entries)

    @pytest.mark.asyncio
    async def test_no_callbacks_set(self, fake_provider):
        """Test that a session runs without callbacks."""
        session = ChatSession(fake_provider)
        message = await session.submit_prompt("quiet")
        assert message.content.endswith("done")


class TestCancellation:
    """Tests for closing and resetting during a stream."""

    @pytest.mark.asyncio
    async def test_close_keeps_partial_content(self, slow_provider):
        """Test that closing mid-stream keeps what arrived and marks it cancelled."""
        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 3)

        assert await session.close()
        message = await submit

        assert not message.loading
        assert message.meta.cancelled
        assert 3 <= len(message.meta.chunks) < 200
        assert message.content == "".join(message.meta.chunks)
        assert not session.is_loading

    @pytest.mark.asyncio
    async def test_no_chunks_after_close(self, slow_provider):
        """Test that the message stops growing once close returns."""
        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 2)

        await session.close()
        content = session.transcript.last.content
        await asyncio.sleep(0.05)

        assert session.transcript.last.content == content
        await submit

    @pytest.mark.asyncio
    async def test_close_when_idle(self, fake_provider):
        """Test that close without a stream is a no-op."""
        session = ChatSession(fake_provider)

        assert not await session.close()

        await session.submit_prompt("done")
        assert not await session.close()
        assert not session.transcript.last.meta.cancelled

    @pytest.mark.asyncio
    async def test_submit_while_loading(self, slow_provider):
        """Test that a second submit is refused while streaming."""
        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 1)

        with pytest.raises(SequencingError):
            await session.submit_prompt("again")
        assert len(session.transcript) == 2

        await session.close()
        await submit

    @pytest.mark.asyncio
    async def test_submit_after_close(self, slow_provider):
        """Test that a new exchange can start after cancelling."""
        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 1)
        await session.close()
        await submit

        slow_provider.fragments = ["short"]
        message = await session.submit_prompt("again")

        assert message.content == "short"
        # The cancelled partial answer is part of the context
        assert len(slow_provider.requests[1]) == 3

    @pytest.mark.asyncio
    async def test_reset_during_stream(self, slow_provider):
        """Test that reset cancels the stream and empties the transcript."""
        session = ChatSession(slow_provider)
        updates = []
        session.set_update_callback(updates.append)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 2)

        await session.reset()
        message = await submit

        assert len(session.transcript) == 0
        assert message.meta.cancelled
        assert updates[-1] is None

    @pytest.mark.asyncio
    async def test_reset_then_submit(self, make_provider):
        """Test that a reset transcript starts a fresh context."""
        provider = make_provider(["ok"])
        session = ChatSession(provider)
        await session.submit_prompt("old")

        await session.reset()
        await session.submit_prompt("new")

        assert [m.content for m in provider.requests[-1]] == ["new"]

    @pytest.mark.asyncio
    async def test_caller_cancellation_marks_message(self, slow_provider):
        """Test that cancelling the submitting task also cancels the message."""
        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 1)

        submit.cancel()
        with pytest.raises(asyncio.CancelledError):
            await submit

        assert session.transcript.last.meta.cancelled
        assert not session.is_loading


class TestErrors:
    """Tests for transport failures."""

    @pytest.mark.asyncio
    async def test_transport_error_finalizes_with_error(self, make_provider, debug_log):
        """Test that a failing stream keeps partial text and records the error."""
        session = ChatSession(make_provider(["a", "b", "c"], fail_after=2))
        session.set_debug_callback(debug_log)

        message = await session.submit_prompt("go")

        assert message.content == "ab"
        assert not message.loading
        assert message.meta.error == "connection reset"
        assert not message.meta.cancelled
        assert ("error", "LLM") in [(level, component) for level, component, _ in debug_log.entries]

    @pytest.mark.asyncio
    async def test_aborted_exchange_closes_stream(self, make_provider, debug_log):
        """Test that a transcript change mid-stream closes the provider stream."""
        provider = make_provider(["a", "b", "c"])
        session = ChatSession(provider)
        session.set_debug_callback(debug_log)

        def cancel_behind_session(message):
            if message is not None and message.loading and message.content:
                session.transcript.cancel()

        session.set_update_callback(cancel_behind_session)

        message = await session.submit_prompt("go")

        assert provider.stream_closed
        assert message.content == "a"
        assert message.meta.cancelled
        assert ("error", "Transcript") in [(level, component) for level, component, _ in debug_log.entries]

    @pytest.mark.asyncio
    async def test_stream_closed_after_each_outcome(self, make_provider, slow_provider):
        """Test that finished, failed and cancelled streams are all released."""
        finished = make_provider(["a"])
        await ChatSession(finished).submit_prompt("go")
        assert finished.stream_closed

        failed = make_provider(["a", "b"], fail_after=1)
        await ChatSession(failed).submit_prompt("go")
        assert failed.stream_closed

        session = ChatSession(slow_provider)
        submit = asyncio.create_task(session.submit_prompt("long"))
        await wait_for_chunks(session, 1)
        await session.close()
        await submit
        assert slow_provider.stream_closed

    @pytest.mark.asyncio
    async def test_failed_exchange_allows_next(self, make_provider):
        """Test that the session recovers after a transport error."""
        provider = make_provider(["a"], fail_after=0)
        session = ChatSession(provider)
        await session.submit_prompt("first")

        provider.fail_after = None
        message = await session.submit_prompt("second")

        assert message.content == "a"
        assert message.meta.error is None


class TestLifecycle:
    """Tests for construction and cleanup."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_provider(self, fake_provider):
        """Test that leaving the context releases the provider."""
        async with ChatSession(fake_provider) as session:
            await session.submit_prompt("hi")

        assert fake_provider.closed

    @pytest.mark.asyncio
    async def test_from_credentials(self):
        """Test building a session from a model name and key."""
        session = ChatSession.from_credentials("gpt-4o-mini", "sk-test")

        assert session.model == "gpt-4o-mini"
        assert len(session.transcript) == 0
        await session.aclose()
