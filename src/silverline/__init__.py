from .breaks import HEADING_GAP, NBSP, PARAGRAPH_BREAK, SENTENCE_BREAK, add_sentence_breaks
from .core import parse_book, parse_book_bytes
from .errors import BookDecodeError, MalformedArchiveError, SilverlineError, UnrecognizedFormatError
from .formats import BookFormat, detect_format
from .reveal import total_length, visible_segments, visible_text
from .segments import TextSegment, segments_from_payload, segments_to_payload

__all__ = [
    "TextSegment",
    "BookFormat",
    "parse_book",
    "parse_book_bytes",
    "detect_format",
    "add_sentence_breaks",
    "NBSP",
    "SENTENCE_BREAK",
    "PARAGRAPH_BREAK",
    "HEADING_GAP",
    "total_length",
    "visible_segments",
    "visible_text",
    "segments_to_payload",
    "segments_from_payload",
    "SilverlineError",
    "UnrecognizedFormatError",
    "MalformedArchiveError",
    "BookDecodeError",
]
