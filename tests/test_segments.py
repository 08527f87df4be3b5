from __future__ import annotations

import json

from silverline.breaks import PARAGRAPH_BREAK
from silverline.segments import (
    TextSegment,
    segment_to_payload,
    segments_from_payload,
    segments_to_payload,
)


def test_payload_uses_consumer_keys_and_omits_unset_flags() -> None:
    segment = TextSegment(text="Intro ", bold=True, italic=False, underline=False, is_heading=True)
    assert segment_to_payload(segment) == {
        "text": "Intro ",
        "bold": True,
        "italic": False,
        "underline": False,
        "isHeading": True,
    }
    assert segment_to_payload(TextSegment(text="x", is_paragraph_break=True)) == {
        "text": "x",
        "isParagraphBreak": True,
    }


def test_payload_survives_json() -> None:
    segments = (
        TextSegment(text="Plain"),
        TextSegment(text="Bold ", bold=True, italic=False, underline=False, is_heading=False),
        TextSegment(text=PARAGRAPH_BREAK, is_paragraph_break=True),
    )
    restored = segments_from_payload(json.loads(json.dumps(segments_to_payload(segments))))
    assert restored == segments


def test_malformed_entries_are_skipped() -> None:
    restored = segments_from_payload(
        [
            "not a mapping",
            {"bold": True},
            {"text": 3},
            {"text": "kept", "bold": "yes", "italic": True},
        ]
    )
    assert restored == (TextSegment(text="kept", italic=True),)
