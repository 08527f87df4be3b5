from __future__ import annotations

from pathlib import PurePath
from typing import Literal

from .errors import UnrecognizedFormatError

__all__ = ["BookFormat", "SUPPORTED_FORMATS", "SUPPORTED_EXTENSIONS", "detect_format"]

BookFormat = Literal["txt", "fb2", "epub"]

SUPPORTED_FORMATS: tuple[BookFormat, ...] = ("txt", "fb2", "epub")
SUPPORTED_EXTENSIONS = tuple(f".{fmt}" for fmt in SUPPORTED_FORMATS)


def _extension(filename: str) -> str:
    name = PurePath(filename).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def detect_format(filename: str) -> BookFormat:
    """Map a file name to its book format using the text after the last dot."""
    extension = _extension(filename)
    if extension == "txt":
        return "txt"
    if extension == "fb2":
        return "fb2"
    if extension == "epub":
        return "epub"
    raise UnrecognizedFormatError(extension)
