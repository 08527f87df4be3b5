from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Iterator

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .breaks import add_sentence_breaks, heading_gap_segment, paragraph_break_segment
from .segments import TextSegment

__all__ = [
    "TextNode",
    "ElementNode",
    "OtherNode",
    "Node",
    "TagRules",
    "FormatContext",
    "node_from_soup",
    "find_element",
    "tag_is",
    "walk",
    "walk_into",
]


@dataclass(frozen=True, slots=True)
class TextNode:
    text: str


@dataclass(frozen=True, slots=True)
class ElementNode:
    tag: str
    children: tuple["Node", ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OtherNode:
    """Comments, CDATA, processing instructions, doctypes."""


Node = TextNode | ElementNode | OtherNode

TagPredicate = Callable[[str], bool]


def tag_is(*names: str) -> TagPredicate:
    allowed = frozenset(names)
    return lambda tag: tag in allowed


def _never(tag: str) -> bool:
    return False


@dataclass(frozen=True, slots=True)
class TagRules:
    """
    Format-specific classification of lower-cased tag names.

    The walker only asks these six questions, so FB2 and XHTML differ in
    nothing but the rules they pass in.
    """

    is_heading: TagPredicate
    is_paragraph: TagPredicate
    is_bold: TagPredicate
    is_italic: TagPredicate
    is_underline: TagPredicate
    is_explicit_break: TagPredicate = _never


@dataclass(frozen=True, slots=True)
class FormatContext:
    is_heading: bool = False
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def entering_heading(self) -> FormatContext:
        return replace(self, is_heading=True, bold=True)

    def styled_by(self, tag: str, rules: TagRules) -> FormatContext:
        return FormatContext(
            is_heading=self.is_heading,
            bold=self.bold or rules.is_bold(tag),
            italic=self.italic or rules.is_italic(tag),
            underline=self.underline or rules.is_underline(tag),
        )


def _attribute_text(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def _leaf_from_soup(node: object) -> Node:
    if isinstance(node, PreformattedString):
        return OtherNode()
    if isinstance(node, NavigableString):
        return TextNode(str(node))
    return OtherNode()


def _element_from_soup(tag: Tag, children: list[Node]) -> ElementNode:
    return ElementNode(
        tag=tag.name or "",
        children=tuple(children),
        attributes={str(key): _attribute_text(value) for key, value in tag.attrs.items()},
    )


def node_from_soup(node: object) -> Node:
    """Convert a BeautifulSoup node (or whole soup) into the walker's node tree."""
    if not isinstance(node, Tag):
        return _leaf_from_soup(node)
    # Built bottom-up on an explicit stack; nesting depth is bounded by memory only.
    stack: list[tuple[Tag, Iterator[object], list[Node]]] = [(node, iter(node.children), [])]
    root: ElementNode | None = None
    while stack:
        tag, pending, children = stack[-1]
        child = next(pending, None)
        if child is None:
            stack.pop()
            element = _element_from_soup(tag, children)
            if stack:
                stack[-1][2].append(element)
            else:
                root = element
        elif isinstance(child, Tag):
            stack.append((child, iter(child.children), []))
        else:
            children.append(_leaf_from_soup(child))
    assert root is not None
    return root


def find_element(node: Node, tag: str) -> ElementNode | None:
    """Return the first element named ``tag`` in document order."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, ElementNode):
            continue
        if current.tag.lower() == tag:
            return current
        stack.extend(reversed(current.children))
    return None


def _text_segment(raw: str, context: FormatContext) -> TextSegment | None:
    text = raw.strip()
    if not text:
        return None
    return TextSegment(
        text=add_sentence_breaks(text) + " ",
        bold=context.is_heading or context.bold,
        italic=context.italic,
        underline=context.underline,
        is_heading=context.is_heading,
    )


_Pending = tuple[Node, FormatContext] | TextSegment


def _schedule(
    stack: list[_Pending],
    children: Iterable[Node],
    context: FormatContext,
    *closing: TextSegment,
) -> None:
    # The stack pops last-in first, so closing markers go on before the
    # children and both are pushed in reverse.
    stack.extend(reversed(closing))
    stack.extend((child, context) for child in reversed(tuple(children)))


def walk_into(
    node: Node,
    rules: TagRules,
    context: FormatContext,
    out: list[TextSegment],
) -> None:
    """
    Append the pre-order flattening of ``node`` to ``out``.

    Uses an explicit work stack, so deeply nested documents never reach the
    interpreter's recursion limit.
    """
    stack: list[_Pending] = [(node, context)]
    while stack:
        item = stack.pop()
        if isinstance(item, TextSegment):
            out.append(item)
            continue
        current, current_context = item
        if isinstance(current, TextNode):
            segment = _text_segment(current.text, current_context)
            if segment is not None:
                out.append(segment)
            continue
        if not isinstance(current, ElementNode):
            continue

        tag = current.tag.lower()
        if rules.is_heading(tag):
            out.append(heading_gap_segment())
            _schedule(
                stack,
                current.children,
                current_context.entering_heading(),
                heading_gap_segment(),
                paragraph_break_segment(),
            )
        elif rules.is_explicit_break(tag):
            out.append(paragraph_break_segment())
        elif rules.is_paragraph(tag):
            _schedule(stack, current.children, current_context, paragraph_break_segment())
        else:
            # Inline styles and unknown containers both descend; unknown tags
            # leave the context unchanged.
            _schedule(stack, current.children, current_context.styled_by(tag, rules))


def walk(node: Node, rules: TagRules, context: FormatContext | None = None) -> list[TextSegment]:
    segments: list[TextSegment] = []
    walk_into(node, rules, context or FormatContext(), segments)
    return segments
