"""Discovery of SVG image references inside host content."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import SvgReference
from .utils import SVG_SUFFIX

logger = logging.getLogger("inline_svg")


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse host content; the first of duplicated attributes is kept."""
    return BeautifulSoup(html, "html.parser", on_duplicate_attribute="ignore")


def _line_offsets(html: str) -> List[int]:
    offsets = [0]
    index = html.find("\n")
    while index != -1:
        offsets.append(index + 1)
        index = html.find("\n", index + 1)
    return offsets


def start_tag_end(html: str, start: int) -> Optional[int]:
    """Return the offset just past the start tag opening at ``start``.

    Quoted attribute values may contain ``>``. None when the tag is unterminated.
    """
    length = len(html)
    i = start + 1
    while i < length:
        char = html[i]
        if char == ">":
            return i + 1
        i += 1
        if char != "=":
            continue
        while i < length and html[i].isspace():
            i += 1
        if i < length and html[i] in "\"'":
            close = html.find(html[i], i + 1)
            if close == -1:
                return None
            i = close + 1
    return None


def locate_start_tag(
    html: str, tag: Tag, line_offsets: Optional[List[int]] = None
) -> Optional[Tuple[int, int]]:
    """Map a tag parsed by ``html.parser`` back to its span in ``html``."""
    if tag.sourceline is None or tag.sourcepos is None:
        return None
    offsets = line_offsets if line_offsets is not None else _line_offsets(html)
    if not 0 < tag.sourceline <= len(offsets):
        return None
    start = offsets[tag.sourceline - 1] + tag.sourcepos
    if html[start : start + len(tag.name) + 1].lower() != "<" + tag.name:
        return None
    end = start_tag_end(html, start)
    if end is None:
        return None
    return start, end


def _reference_attributes(img: Tag) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for name, value in img.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attributes[name] = value if value is not None else ""
    return attributes


def find_svg_references(html: str, base_url: str) -> List[SvgReference]:
    """Return every <img> whose ``src`` ends in ``.svg``, in document order.

    Sources are resolved against ``base_url``; ``start``/``end`` give the span
    of the tag in ``html``.
    """
    soup = parse_fragment(html)
    offsets = _line_offsets(html)
    references: List[SvgReference] = []
    for img in soup.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        src = src.strip()
        if not src.lower().endswith(SVG_SUFFIX):
            continue
        span = locate_start_tag(html, img, offsets)
        if span is None:
            logger.debug("Could not locate <img src=%r> in fragment", src)
            continue
        references.append(
            SvgReference(
                src=src,
                locator=urljoin(base_url, src),
                attributes=_reference_attributes(img),
                start=span[0],
                end=span[1],
            )
        )
    return references
