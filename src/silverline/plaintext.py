from __future__ import annotations

import logging
import re

from .breaks import SENTENCE_BREAK, add_sentence_breaks, paragraph_break_segment
from .errors import BookDecodeError
from .segments import TextSegment

__all__ = ["decode_text", "parse_txt", "parse_txt_bytes"]

logger = logging.getLogger(__name__)

_LINE_SPLIT_PATTERN = re.compile(r"\r?\n")


def decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise BookDecodeError(f"Text is not valid UTF-8: {exc}") from exc


def parse_txt(text: str) -> list[TextSegment]:
    """
    Split plain text into one segment per non-blank line.

    A run of blank lines becomes a single paragraph break, and only when a
    non-blank line follows it; blank lines at the end of the file emit nothing.
    """
    segments: list[TextSegment] = []
    lines = _LINE_SPLIT_PATTERN.split(text)
    last_index = len(lines) - 1
    for index, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not line:
            if index < last_index and lines[index + 1].strip():
                segments.append(paragraph_break_segment())
            continue
        segments.append(TextSegment(text=add_sentence_breaks(line) + SENTENCE_BREAK))
    logger.debug("Plain text: %d lines -> %d segments", len(lines), len(segments))
    return segments


def parse_txt_bytes(data: bytes) -> list[TextSegment]:
    return parse_txt(decode_text(data))
