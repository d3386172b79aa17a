"""Transcript errors."""


class TranscriptError(Exception):
    """Base class for transcript errors."""


class SequencingError(TranscriptError):
    """A transcript operation was called in the wrong streaming state.

    Under correct use the session controller never triggers this, so it
    signals a controller bug rather than bad user input.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Cannot {operation}: {reason}")
        self.operation = operation
        self.reason = reason
