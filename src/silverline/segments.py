from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

__all__ = [
    "TextSegment",
    "segment_to_payload",
    "segments_to_payload",
    "segments_from_payload",
]

# (attribute, payload key) pairs in payload order.
_FLAG_KEYS = (
    ("bold", "bold"),
    ("italic", "italic"),
    ("underline", "underline"),
    ("is_heading", "isHeading"),
    ("is_paragraph_break", "isParagraphBreak"),
)


@dataclass(frozen=True, slots=True)
class TextSegment:
    """
    One styled run of the flattened book text.

    Flags left as ``None`` are "not set" and read as false by consumers.
    Break segments carry only ``is_paragraph_break`` and a run of
    non-breaking spaces; they still count toward character offsets.
    """

    text: str
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    is_heading: bool | None = None
    is_paragraph_break: bool | None = None


def segment_to_payload(segment: TextSegment) -> dict[str, object]:
    entry: dict[str, object] = {"text": segment.text}
    for attr, key in _FLAG_KEYS:
        value = getattr(segment, attr)
        if value is not None:
            entry[key] = value
    return entry


def segments_to_payload(segments: Iterable[TextSegment]) -> list[dict[str, object]]:
    return [segment_to_payload(segment) for segment in segments]


def segments_from_payload(data: Iterable[Mapping[str, object]]) -> tuple[TextSegment, ...]:
    segments: list[TextSegment] = []
    for entry in data:
        if not isinstance(entry, Mapping):
            continue
        text = entry.get("text")
        if not isinstance(text, str):
            continue
        flags: dict[str, bool] = {}
        for attr, key in _FLAG_KEYS:
            value = entry.get(key)
            if isinstance(value, bool):
                flags[attr] = value
        segments.append(TextSegment(text=text, **flags))
    return tuple(segments)
