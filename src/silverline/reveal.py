from __future__ import annotations

import math
import re
from dataclasses import replace
from pathlib import PurePath
from typing import Sequence

from .segments import TextSegment

__all__ = ["book_title", "clamp_offset", "total_length", "visible_segments", "visible_text"]

_BOOK_SUFFIX_PATTERN = re.compile(r"\.(txt|fb2|epub)$", re.IGNORECASE)


def total_length(segments: Sequence[TextSegment]) -> int:
    return sum(len(segment.text) for segment in segments)


def clamp_offset(offset: float, segments: Sequence[TextSegment]) -> float:
    return max(0, min(total_length(segments), offset))


def visible_segments(segments: Sequence[TextSegment], offset: float) -> list[TextSegment]:
    """
    Return what a scrolling display shows once ``offset`` characters are revealed.

    Segments ending at or before the offset are returned whole, the segment
    straddling it is cut to a prefix (fractional offsets round down), and
    nothing after it is included. Break markers count like any other text.
    """
    visible: list[TextSegment] = []
    position = 0
    for segment in segments:
        end = position + len(segment.text)
        if end <= offset:
            visible.append(segment)
        elif position < offset:
            cut = math.floor(offset - position)
            visible.append(replace(segment, text=segment.text[:cut]))
            break
        else:
            break
        position = end
    return visible


def visible_text(segments: Sequence[TextSegment], offset: float) -> str:
    return "".join(segment.text for segment in visible_segments(segments, offset))


def book_title(filename: str) -> str:
    return _BOOK_SUFFIX_PATTERN.sub("", PurePath(filename).name)
