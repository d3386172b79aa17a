"""Chat transcript module.

Holds the ordered messages of a conversation together with their streaming
metadata.
"""

from .errors import SequencingError, TranscriptError
from .models import Message, MessageMeta, Role
from .store import TranscriptStore

__all__ = [
    "Message",
    "MessageMeta",
    "Role",
    "SequencingError",
    "TranscriptError",
    "TranscriptStore",
]
