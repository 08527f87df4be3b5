from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Sequence

from .core import parse_book_bytes
from .formats import detect_format
from .reveal import total_length
from .segments import TextSegment, segments_from_payload, segments_to_payload

__all__ = [
    "SEGMENT_CACHE_SUFFIX",
    "SEGMENT_CACHE_VERSION",
    "segments_cache_path",
    "write_segments_cache",
    "load_segments_cache",
    "load_or_parse",
]

logger = logging.getLogger(__name__)

SEGMENT_CACHE_SUFFIX = ".silverline.json"
SEGMENT_CACHE_VERSION = 1


def segments_cache_path(book_path: Path) -> Path:
    return book_path.with_name(book_path.name + SEGMENT_CACHE_SUFFIX)


def _sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def _write_cache(book_path: Path, data: bytes, segments: Sequence[TextSegment]) -> Path:
    cache_path = segments_cache_path(book_path)
    payload: dict[str, object] = {
        "version": SEGMENT_CACHE_VERSION,
        "source": book_path.name,
        "source_sha1": _sha1(data),
        "format": detect_format(book_path.name),
        "total_length": total_length(segments),
        "segments": segments_to_payload(segments),
    }
    cache_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return cache_path


def write_segments_cache(book_path: Path, segments: Sequence[TextSegment]) -> Path:
    return _write_cache(book_path, book_path.read_bytes(), segments)


def _load_cache(book_path: Path, data: bytes) -> tuple[TextSegment, ...] | None:
    cache_path = segments_cache_path(book_path)
    try:
        raw = json.loads(cache_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(raw, dict):
        return None
    if raw.get("version") != SEGMENT_CACHE_VERSION:
        return None
    if raw.get("source_sha1") != _sha1(data):
        logger.debug("Segment cache for %s is stale", book_path.name)
        return None
    entries = raw.get("segments")
    if not isinstance(entries, list):
        return None
    return segments_from_payload(entries)


def load_segments_cache(book_path: Path) -> tuple[TextSegment, ...] | None:
    """Return cached segments for ``book_path`` if the cache matches its bytes."""
    try:
        data = book_path.read_bytes()
    except OSError:
        return None
    return _load_cache(book_path, data)


def load_or_parse(book_path: Path, *, use_cache: bool = True) -> tuple[TextSegment, ...]:
    detect_format(book_path.name)
    data = book_path.read_bytes()
    if use_cache:
        cached = _load_cache(book_path, data)
        if cached is not None:
            logger.debug("Loaded %d segments for %s from cache", len(cached), book_path.name)
            return cached
    segments = parse_book_bytes(data, book_path.name)
    if use_cache:
        try:
            _write_cache(book_path, data, segments)
        except OSError as exc:
            logger.warning("Could not write segment cache for %s: %s", book_path.name, exc)
    return segments
