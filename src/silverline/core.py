from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Callable

from .epub import parse_epub
from .fb2 import parse_fb2
from .formats import BookFormat, detect_format
from .plaintext import parse_txt_bytes
from .segments import TextSegment

__all__ = ["parse_book", "parse_book_bytes", "PARSERS"]

logger = logging.getLogger(__name__)

PARSERS: dict[BookFormat, Callable[[bytes], list[TextSegment]]] = {
    "txt": parse_txt_bytes,
    "fb2": parse_fb2,
    "epub": parse_epub,
}


def parse_book_bytes(data: bytes, filename: str) -> tuple[TextSegment, ...]:
    book_format = detect_format(filename)
    logger.debug("Parsing %s as %s (%d bytes)", filename, book_format, len(data))
    segments = PARSERS[book_format](data)
    return tuple(segments)


def parse_book(
    source: str | Path | BinaryIO,
    filename: str | None = None,
) -> tuple[TextSegment, ...]:
    """
    Parse a .txt, .fb2 or .epub book into its flat segment sequence.

    ``source`` is a path or an open binary handle. The format comes from
    ``filename`` when given, otherwise from the path (or the handle's
    ``name``). Detection happens before the file is read, so an unknown
    extension never touches the content.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        name = filename or path.name
        detect_format(name)
        data = path.read_bytes()
    else:
        name = filename or Path(str(getattr(source, "name", ""))).name
        detect_format(name)
        data = source.read()
    return parse_book_bytes(data, name)
