from __future__ import annotations

import re

from .segments import TextSegment

__all__ = [
    "NBSP",
    "SENTENCE_BREAK",
    "PARAGRAPH_BREAK",
    "HEADING_GAP",
    "add_sentence_breaks",
    "heading_gap_segment",
    "is_break_marker",
    "paragraph_break_segment",
]

# Non-breaking spaces survive whitespace collapsing in text layout, so the
# marker runs double as horizontal spacing for the renderer.
NBSP = "\u00a0"
SENTENCE_BREAK = NBSP * 10
PARAGRAPH_BREAK = NBSP * 25
HEADING_GAP = NBSP * 30

_SENTENCE_END_PATTERN = re.compile(r"([.!?])\s+")


def add_sentence_breaks(text: str) -> str:
    """Replace the whitespace after ``.``, ``!`` or ``?`` with a sentence break."""
    return _SENTENCE_END_PATTERN.sub(lambda match: match.group(1) + SENTENCE_BREAK, text)


def paragraph_break_segment() -> TextSegment:
    return TextSegment(text=PARAGRAPH_BREAK, is_paragraph_break=True)


def heading_gap_segment() -> TextSegment:
    return TextSegment(text=HEADING_GAP, is_paragraph_break=True)


def is_break_marker(text: str) -> bool:
    return bool(text) and text.strip(NBSP) == ""
