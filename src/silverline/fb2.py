from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from .segments import TextSegment
from .walker import TagRules, find_element, node_from_soup, tag_is, walk

__all__ = ["FB2_RULES", "parse_fb2"]

logger = logging.getLogger(__name__)


def _is_fb2_heading(tag: str) -> bool:
    return tag in {"title", "subtitle"} or tag.startswith("h")


FB2_RULES = TagRules(
    is_heading=_is_fb2_heading,
    is_paragraph=tag_is("p"),
    is_explicit_break=tag_is("empty-line"),
    is_bold=tag_is("strong", "b"),
    is_italic=tag_is("emphasis", "em", "i"),
    is_underline=tag_is("u"),
)


def parse_fb2(data: bytes | str) -> list[TextSegment]:
    """
    Flatten the first ``<body>`` of a FictionBook document.

    Raw bytes go straight to the XML parser so the document's own encoding
    declaration (often windows-1251) is honoured. Later bodies hold notes and
    are not read.
    """
    soup = BeautifulSoup(data, "lxml-xml")
    body = find_element(node_from_soup(soup), "body")
    if body is None:
        logger.debug("FB2 document has no <body>")
        return []
    segments = walk(body, FB2_RULES)
    logger.debug("FB2: %d segments", len(segments))
    return segments
