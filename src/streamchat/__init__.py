"""
streamchat: a streaming chat client that renders code fences while they arrive.

Each module hides one design decision: how text is segmented, how the
transcript tracks streaming state, how fragments are obtained from a
provider, and how segments are drawn.
"""

__version__ = "0.1.0"

from .segments import CodeBlock, InlineCode, PlainText, Segment, classify
from .session import ChatSession
from .transcript import Message, MessageMeta, Role, SequencingError, TranscriptStore

__all__ = [
    "ChatSession",
    "CodeBlock",
    "InlineCode",
    "Message",
    "MessageMeta",
    "PlainText",
    "Role",
    "Segment",
    "SequencingError",
    "TranscriptStore",
    "classify",
]
