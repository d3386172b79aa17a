"""Segment classification for streamed chat text.

Turns raw message content into plain text, fenced code blocks and inline
code spans, tolerating markup that has not finished arriving.
"""

from .classifier import classify, detect_language, split_fences, split_inline, strip_language
from .models import CodeBlock, InlineCode, PlainText, Segment

__all__ = [
    "CodeBlock",
    "InlineCode",
    "PlainText",
    "Segment",
    "classify",
    "detect_language",
    "split_fences",
    "split_inline",
    "strip_language",
]
