from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .book_io import load_or_parse
from .errors import BookDecodeError, MalformedArchiveError, UnrecognizedFormatError
from .formats import detect_format
from .library import list_books
from .reveal import book_title, clamp_offset, total_length, visible_segments
from .segments import segments_to_payload

__all__ = ["WebConfig", "create_app"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WebConfig:
    root: Path
    cache: bool = True


def create_app(config: WebConfig) -> FastAPI:
    root = config.root.expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Books root not found: {root}")

    app = FastAPI(title="silverline")
    app.state.config = config
    app.state.root = root

    def _book_path(book_id: str) -> Path:
        path = (root / book_id).resolve()
        if path.parent != root or not path.is_file():
            raise HTTPException(status_code=404, detail="Book not found")
        return path

    @app.get("/api/books")
    def api_books() -> JSONResponse:
        books_payload = [
            {"id": book.book_id, "title": book.title, "format": book.format}
            for book in list_books(root)
        ]
        return JSONResponse({"books": books_payload})

    @app.get("/api/books/{book_id}/segments")
    def api_segments(book_id: str, offset: float | None = None) -> JSONResponse:
        book_path = _book_path(book_id)
        try:
            book_format = detect_format(book_path.name)
            segments = load_or_parse(book_path, use_cache=config.cache)
        except UnrecognizedFormatError as exc:
            raise HTTPException(status_code=415, detail=str(exc)) from exc
        except (MalformedArchiveError, BookDecodeError) as exc:
            logger.warning("Failed to parse %s: %s", book_path.name, exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        payload: dict[str, object] = {
            "id": book_path.name,
            "title": book_title(book_path.name),
            "format": book_format,
            "total_length": total_length(segments),
        }
        if offset is None:
            payload["segments"] = segments_to_payload(segments)
        else:
            clamped = clamp_offset(offset, segments)
            payload["offset"] = clamped
            payload["segments"] = segments_to_payload(visible_segments(segments, clamped))
        return JSONResponse(payload)

    return app
