from __future__ import annotations

__all__ = [
    "SilverlineError",
    "UnrecognizedFormatError",
    "MalformedArchiveError",
    "BookDecodeError",
]


class SilverlineError(Exception):
    """Base class for book parsing failures."""


class UnrecognizedFormatError(SilverlineError, ValueError):
    """Raised when a file name does not carry a supported book extension."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Unknown file format: {extension}")


class MalformedArchiveError(SilverlineError, ValueError):
    """Raised when an EPUB lacks its container, package path, or package document."""


class BookDecodeError(SilverlineError, ValueError):
    """Raised when book bytes cannot be decoded as text, XML, or a zip archive."""
