"""Allow-list sanitization for SVG markup.

The markup is parsed into a tree with BeautifulSoup's XML builder (lxml in
recover mode, so malformed documents still produce a tree). Every node that is
not explicitly allowed is removed:

- disallowed elements are unwrapped, keeping their allowed descendants, except
  for the ``DROP_CONTENT_ELEMENTS`` whose whole subtree is discarded;
- disallowed attributes are deleted, and so are allowed attributes whose value
  carries a scripting URI;
- comments, processing instructions, doctypes and CDATA sections are deleted.

The serialization of the first remaining ``<svg>`` element is returned, or an
empty string when none survived.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString
from lxml import etree

from .models import AllowList

logger = logging.getLogger("inline_svg")

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

DEFAULT_ALLOW_LIST = AllowList(
    {
        "svg": {"xmlns", "viewBox", "width", "height", "id", "class"},
        "g": {"fill", "stroke", "id", "class"},
        "path": {"d", "fill", "stroke", "id", "class"},
        "circle": {"cx", "cy", "r", "fill", "id", "class"},
        "rect": {"x", "y", "width", "height", "fill", "id", "class", "rx"},
        "line": {"x1", "y1", "x2", "y2", "stroke", "id", "class"},
        "polygon": {"points", "fill", "id", "class"},
        "polyline": {"points", "fill", "id", "class"},
        "ellipse": {"cx", "cy", "rx", "ry", "fill", "id", "class"},
        "title": {"id", "class"},
        "desc": {"id", "class"},
    }
)

# Lowercase names; their text content is never kept.
DROP_CONTENT_ELEMENTS = frozenset(
    {"script", "style", "foreignobject", "iframe", "object", "embed"}
)

_CONTROL_CHARS = re.compile(r"[\x00-\x20\x7f]+")
_DANGEROUS_VALUE = re.compile(r"(javascript|vbscript|livescript):|data:text/html")
_DOCTYPE = re.compile(rb"<!DOCTYPE", re.IGNORECASE)


def has_dangerous_value(value: str) -> bool:
    """Detect scripting URIs, including ones split by whitespace or control chars."""
    compact = _CONTROL_CHARS.sub("", value).lower()
    return bool(_DANGEROUS_VALUE.search(compact))


def _is_allowed_element(tag: Tag, allow_list: AllowList) -> bool:
    if tag.prefix:
        return False
    if tag.namespace and tag.namespace != SVG_NAMESPACE:
        return False
    return allow_list.allows_element(tag.name)


def _filter_attributes(tag: Tag, allow_list: AllowList) -> None:
    for name in list(tag.attrs):
        value = tag.attrs[name]
        if isinstance(value, list):
            value = " ".join(value)
        if not allow_list.allows_attribute(tag.name, str(name)):
            del tag.attrs[name]
        elif has_dangerous_value(value):
            logger.debug("Dropping %s=%r on <%s>", name, value, tag.name)
            del tag.attrs[name]


def _clean_children(node: Tag, allow_list: AllowList) -> None:
    for child in list(node.children):
        if isinstance(child, Tag):
            if _is_allowed_element(child, allow_list):
                _filter_attributes(child, allow_list)
                _clean_children(child, allow_list)
            elif child.name.lower() in DROP_CONTENT_ELEMENTS:
                child.decompose()
            else:
                _clean_children(child, allow_list)
                child.unwrap()
        elif isinstance(child, PreformattedString):
            # Comment, CData, ProcessingInstruction, Doctype, Declaration
            child.extract()
        elif not isinstance(child, NavigableString):
            child.extract()


def _drop_doctype(data: bytes, encoding: Optional[str]) -> Tuple[bytes, Optional[str]]:
    """Re-serialize documents carrying a DOCTYPE without it.

    The bs4 XML builder yields no elements for documents with an internal DTD
    subset (Illustrator exports), so those are parsed by lxml first. Only
    internal entities are expanded; external ones and the network are never loaded.
    """
    if not _DOCTYPE.search(data):
        return data, encoding
    parser = etree.XMLParser(
        encoding=encoding,
        recover=True,
        resolve_entities="internal",
        load_dtd=False,
        no_network=True,
    )
    root = etree.fromstring(data, parser)
    if root is None:
        return data, encoding
    return etree.tostring(root, encoding="utf-8"), "utf-8"


def parse_svg(markup: Union[str, bytes]) -> BeautifulSoup:
    """Parse SVG text into a BeautifulSoup tree using the XML builder."""
    encoding = None
    if isinstance(markup, str):
        markup, encoding = markup.encode("utf-8"), "utf-8"
    markup, encoding = _drop_doctype(markup, encoding)
    return BeautifulSoup(markup, "xml", from_encoding=encoding)


def sanitize_svg(
    markup: Union[str, bytes],
    allow_list: AllowList = DEFAULT_ALLOW_LIST,
) -> str:
    """Return ``markup`` reduced to the elements and attributes in ``allow_list``.

    An empty string means no ``<svg>`` root survived; callers treat it as a
    sanitization failure.
    """
    if not markup or not markup.strip():
        return ""
    try:
        soup = parse_svg(markup)
    except (ParserRejectedMarkup, etree.LxmlError) as exc:
        logger.warning("Could not parse SVG markup: %s", exc)
        return ""
    _clean_children(soup, allow_list)
    root = soup.find("svg")
    if root is None:
        return ""
    return root.decode()
