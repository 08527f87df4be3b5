from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .formats import SUPPORTED_EXTENSIONS, BookFormat, detect_format
from .reveal import book_title

__all__ = ["BookEntry", "list_books"]


@dataclass(slots=True)
class BookEntry:
    path: Path
    book_id: str
    title: str
    format: BookFormat


def list_books(root: Path) -> list[BookEntry]:
    entries: list[tuple[tuple[str, str], BookEntry]] = []
    for entry in root.iterdir():
        if not entry.is_file() or entry.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        title = book_title(entry.name)
        book = BookEntry(
            path=entry,
            book_id=entry.name,
            title=title,
            format=detect_format(entry.name),
        )
        entries.append(((title.casefold(), entry.name.casefold()), book))
    entries.sort(key=lambda item: item[0])
    return [book for _, book in entries]
