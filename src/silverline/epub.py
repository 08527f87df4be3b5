from __future__ import annotations

import io
import logging
import posixpath
import warnings
import xml.etree.ElementTree as ET
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator
from urllib.parse import unquote

from bs4 import BeautifulSoup, FeatureNotFound, XMLParsedAsHTMLWarning

from .errors import BookDecodeError, MalformedArchiveError
from .segments import TextSegment
from .walker import ElementNode, FormatContext, TagRules, find_element, node_from_soup, tag_is, walk_into

__all__ = ["CONTAINER_PATH", "EPUB_RULES", "parse_epub", "spine_documents"]

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"

EPUB_RULES = TagRules(
    is_heading=tag_is("h1", "h2", "h3", "h4", "h5", "h6"),
    is_paragraph=tag_is("p"),
    is_bold=tag_is("strong", "b"),
    is_italic=tag_is("em", "i"),
    is_underline=tag_is("u"),
)

# Errors zipfile can raise while inflating a single damaged member.
_UNREADABLE_ENTRY_ERRORS = (zipfile.BadZipFile, zlib.error, OSError, NotImplementedError, RuntimeError)


def _zip_read_text(zf: zipfile.ZipFile, name: str) -> str:
    raw = zf.read(name)
    for enc in ("utf-8", "utf-16", "cp932", "shift_jis", "euc_jp"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="ignore")


def _has_entry(zf: zipfile.ZipFile, name: str) -> bool:
    try:
        zf.getinfo(name)
    except KeyError:
        return False
    return True


def _strip_tag(tag: str) -> str:
    return tag.split("}", 1)[-1] if "}" in tag else tag


def _get_attr(elem: ET.Element, name: str) -> str | None:
    for attr, value in elem.attrib.items():
        if _strip_tag(attr) == name:
            return value
    return None


def _iter_named(root: ET.Element, name: str) -> Iterator[ET.Element]:
    # Namespace-agnostic: container.xml and OPF files disagree on prefixes in the wild.
    for elem in root.iter():
        if isinstance(elem.tag, str) and _strip_tag(elem.tag) == name:
            yield elem


def _read_package_entry(zf: zipfile.ZipFile, name: str) -> str:
    try:
        return _zip_read_text(zf, name)
    except _UNREADABLE_ENTRY_ERRORS as exc:
        raise BookDecodeError(f"Invalid EPUB: cannot read {name}: {exc}") from exc


def _parse_xml(text: str, name: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise BookDecodeError(f"Invalid EPUB: cannot parse {name}: {exc}") from exc


def _resolve_opf_href(opf_path: str, href: str) -> str:
    target = unquote(href.split("#", 1)[0])
    base = posixpath.dirname(opf_path)
    combined = posixpath.join(base, target) if base else target
    return posixpath.normpath(combined)


def _find_opf_path(zf: zipfile.ZipFile) -> str:
    # META-INF/container.xml -> rootfiles/rootfile@full-path
    if not _has_entry(zf, CONTAINER_PATH):
        raise MalformedArchiveError("Invalid EPUB: missing container.xml")
    container = _read_package_entry(zf, CONTAINER_PATH)
    if not container:
        raise MalformedArchiveError("Invalid EPUB: missing container.xml")
    root = _parse_xml(container, CONTAINER_PATH)
    rootfile = next(_iter_named(root, "rootfile"), None)
    full_path = _get_attr(rootfile, "full-path") if rootfile is not None else None
    if not full_path:
        raise MalformedArchiveError("Invalid EPUB: missing OPF path")
    return full_path


def _load_opf(zf: zipfile.ZipFile, opf_path: str) -> ET.Element:
    if not _has_entry(zf, opf_path):
        raise MalformedArchiveError("Invalid EPUB: missing OPF file")
    opf_xml = _read_package_entry(zf, opf_path)
    if not opf_xml:
        raise MalformedArchiveError("Invalid EPUB: missing OPF file")
    return _parse_xml(opf_xml, opf_path)


def _manifest_paths(opf_root: ET.Element, opf_path: str) -> dict[str, str]:
    manifest: dict[str, str] = {}
    for item in _iter_named(opf_root, "item"):
        item_id = _get_attr(item, "id")
        href = _get_attr(item, "href")
        if item_id and href:
            manifest[item_id] = _resolve_opf_href(opf_path, href)
    return manifest


def spine_documents(zf: zipfile.ZipFile) -> list[str]:
    """
    Resolve the reading order of an open EPUB to archive member paths.

    Itemrefs whose idref is missing from the manifest are dropped; the
    remaining paths keep spine order and are not checked for existence.
    """
    opf_path = _find_opf_path(zf)
    opf_root = _load_opf(zf, opf_path)
    manifest = _manifest_paths(opf_root, opf_path)
    documents: list[str] = []
    for itemref in _iter_named(opf_root, "itemref"):
        idref = _get_attr(itemref, "idref")
        if not idref:
            continue
        path = manifest.get(idref)
        if path is None:
            logger.debug("Spine idref %r has no manifest entry; skipping", idref)
            continue
        documents.append(path)
    logger.debug("EPUB package %s: %d manifest items, %d spine documents", opf_path, len(manifest), len(documents))
    return documents


def _soup_from_html(html: str) -> BeautifulSoup:
    stripped = html.lstrip()
    lower_head = stripped[:200].lower()
    xmlish = stripped.startswith("<?xml") or (
        "<html" in lower_head and "xmlns" in lower_head
    )

    if xmlish:
        return BeautifulSoup(html, "lxml-xml")

    for parser in ("lxml", "html.parser"):
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
                return BeautifulSoup(html, parser)
        except FeatureNotFound:
            continue
    return BeautifulSoup(html, "html.parser")


def _load_body(zf: zipfile.ZipFile, name: str) -> ElementNode | None:
    if not _has_entry(zf, name):
        logger.debug("Spine document %s not found in archive; skipping", name)
        return None
    try:
        html = _zip_read_text(zf, name)
    except _UNREADABLE_ENTRY_ERRORS as exc:
        logger.warning("Skipping unreadable spine document %s: %s", name, exc)
        return None
    if not html:
        return None
    return find_element(node_from_soup(_soup_from_html(html)), "body")


def _open_archive(source: str | Path | BinaryIO | bytes) -> zipfile.ZipFile:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        return zipfile.ZipFile(source, "r")
    except zipfile.BadZipFile as exc:
        raise BookDecodeError(f"Invalid EPUB: not a zip archive ({exc})") from exc


def parse_epub(source: str | Path | BinaryIO | bytes) -> list[TextSegment]:
    """
    Flatten every spine document of an EPUB, in spine order.

    A missing container, package path, or package document aborts the
    parse. Individual spine documents that cannot be found or read are
    skipped.
    """
    segments: list[TextSegment] = []
    with _open_archive(source) as zf:
        for name in spine_documents(zf):
            body = _load_body(zf, name)
            if body is None:
                continue
            before = len(segments)
            walk_into(body, EPUB_RULES, FormatContext(), segments)
            logger.debug("Spine document %s: %d segments", name, len(segments) - before)
    return segments
