"""Fence and inline-code segmentation of (possibly partial) message text.

Hides how markup is recognised in streamed text. The classifier is a pure
function of the text: it keeps no state between calls, so callers simply
re-run it on the full accumulated content whenever the content grows.

Classification runs in three passes:

1. Split on every fence token. Odd spans are code; an odd number of fences
   leaves the last span open, and it still renders as code.
2. Look for the first complete, language-tagged block. Its tag becomes the
   language of every code span in the text (see ``detect_language``).
3. If the text contains a lone backtick, re-split each plain span on lone
   backticks into plain text and inline code. Code spans are never re-split.
"""

import re

from .models import FENCE, CodeBlock, InlineCode, PlainText, Segment

# First complete block of the shape ```lang\n...\n```
TAGGED_BLOCK_PATTERN = re.compile(r"`{3}(\w+)\n([\s\S]+?)\n`{3}", re.ASCII)

# A backtick that is not directly followed by another backtick
LONE_BACKTICK_PATTERN = re.compile(r"`(?!`)")


def detect_language(text: str) -> str | None:
    """Return the language tag of the first complete tagged block, if any.

    The tag applies to every code block in ``text``, not just the one it was
    read from. Messages that mix languages therefore render all of their
    blocks with the first language found.
    """
    match = TAGGED_BLOCK_PATTERN.search(text)
    return match.group(1) if match else None


def strip_language(span: str, language: str | None) -> str:
    """Remove the first occurrence of ``language`` from a code span."""
    if not language:
        return span
    return span.replace(language, "", 1)


def _display_code(span: str, language: str | None) -> str:
    code = strip_language(span, language)
    return code.removeprefix("\n").removesuffix("\n")


def _has_inline_marker(text: str) -> bool:
    return LONE_BACKTICK_PATTERN.search(text) is not None


def split_fences(text: str) -> list[PlainText | CodeBlock]:
    """Split text into alternating plain and code segments.

    Empty plain spans are kept so that plain and code segments strictly
    alternate, starting and ending with plain text unless the last fence is
    still open.
    """
    spans = text.split(FENCE)
    language = detect_language(text) if len(spans) > 1 else None
    last = len(spans) - 1

    segments: list[PlainText | CodeBlock] = []
    for index, span in enumerate(spans):
        if index % 2 == 0:
            segments.append(PlainText(text=span))
        else:
            segments.append(CodeBlock(
                language=language,
                code=_display_code(span, language),
                raw=span,
                terminated=index != last,
            ))
    return segments


def split_inline(text: str) -> list[PlainText | InlineCode]:
    """Split plain text on lone backticks into plain and inline-code parts."""
    parts = LONE_BACKTICK_PATTERN.split(text)
    last = len(parts) - 1

    segments: list[PlainText | InlineCode] = []
    for index, part in enumerate(parts):
        if index % 2 == 0:
            segments.append(PlainText(text=part))
        else:
            segments.append(InlineCode(text=part, terminated=index != last))
    return segments


def classify(text: str) -> list[Segment]:
    """Classify message text into ordered render segments.

    Never fails: text without any backticks comes back as a single
    ``PlainText`` equal to the input.

    Args:
        text: Full accumulated message content

    Returns:
        Segments in left-to-right order. Joining their ``source`` values
        reproduces ``text`` exactly.
    """
    segments: list[Segment] = list(split_fences(text))

    if not _has_inline_marker(text):
        return segments

    result: list[Segment] = []
    for segment in segments:
        if isinstance(segment, PlainText):
            result.extend(split_inline(segment.text))
        else:
            result.append(segment)
    return result
