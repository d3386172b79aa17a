"""In-memory transcript store.

Hides the transcript representation and enforces the streaming lifecycle of
its messages. A message moves through exactly these transitions::

    begin_assistant_message -> append_chunk* -> finalize | cancel

and at most one message, always the last one, is loading at any time.
"""

from collections.abc import Iterator

from ..llm.models import ChatMessage
from .errors import SequencingError
from .models import Message, MessageMeta, Role


class TranscriptStore:
    """Ordered, append-only list of chat messages.

    The only destructive operation is ``reset``, which clears everything.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the transcript in order."""
        return list(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    @property
    def loading_message(self) -> Message | None:
        """The message currently being streamed, if any."""
        last = self.last
        if last is not None and last.meta.loading:
            return last
        return None

    @property
    def is_loading(self) -> bool:
        return self.loading_message is not None

    def _require_idle(self, operation: str) -> None:
        if self.is_loading:
            raise SequencingError(operation, "another message is still loading")

    def _require_loading(self, operation: str) -> Message:
        message = self.loading_message
        if message is None:
            raise SequencingError(operation, "no message is loading")
        return message

    def append_user_message(self, content: str) -> Message:
        """Append a finalized user message."""
        self._require_idle("append user message")
        message = Message(role=Role.USER, content=content)
        self._messages.append(message)
        return message

    def begin_assistant_message(self) -> Message:
        """Append an empty assistant message that is loading."""
        self._require_idle("begin assistant message")
        message = Message(role=Role.ASSISTANT, meta=MessageMeta(loading=True))
        self._messages.append(message)
        return message

    def append_chunk(self, fragment: str) -> Message:
        """Append a streamed fragment to the loading message.

        Raises:
            SequencingError: If no message is loading. The transcript is left
                unchanged.
        """
        message = self._require_loading("append chunk")
        message.content += fragment
        message.meta.chunks.append(fragment)
        return message

    def finalize(self, response_time: float, error: str | None = None) -> Message:
        """Close the loading message after its stream completed.

        Args:
            response_time: Seconds from stream start to completion
            error: Transport error that ended the stream early, if any
        """
        message = self._require_loading("finalize")
        message.meta.loading = False
        message.meta.response_time = response_time
        message.meta.error = error
        return message

    def cancel(self, response_time: float | None = None) -> Message:
        """Close the loading message without a completion signal.

        Content received so far is kept.
        """
        message = self._require_loading("cancel")
        message.meta.loading = False
        message.meta.cancelled = True
        message.meta.response_time = response_time
        return message

    def reset(self) -> None:
        """Clear the transcript.

        Raises:
            SequencingError: If a message is still loading. Cancel the stream
                first.
        """
        self._require_idle("reset transcript")
        self._messages.clear()

    def history(self) -> list[ChatMessage]:
        """Finalized, non-empty messages in provider format."""
        return [
            message.to_chat_message()
            for message in self._messages
            if not message.meta.loading and message.content
        ]
