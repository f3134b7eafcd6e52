"""Copy presentation attributes from an <img> onto an inline <svg> root."""

from __future__ import annotations

import re
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from bs4 import Tag

from .sanitizer import parse_svg

AttributeValue = Union[str, List[str]]

MERGED_ATTRIBUTES = frozenset(
    {"class", "style", "alt", "title", "width", "height", "id", "src"}
)
MERGED_PREFIXES = ("data-", "aria-")
RENAMED_ATTRIBUTES = {"src": "data-src"}

_VALID_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.:-]*$")


def is_merged_attribute(name: str) -> bool:
    lowered = name.lower()
    if lowered in MERGED_ATTRIBUTES:
        return True
    return lowered.startswith(MERGED_PREFIXES) and bool(_VALID_NAME.match(lowered))


def _flatten(value: AttributeValue) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def select_attributes(
    attributes: Mapping[str, AttributeValue],
) -> List[Tuple[str, str]]:
    """Return the attributes to copy, renamed, in reference order.

    If a name occurs more than once (possible after renaming, e.g. ``src`` next
    to an explicit ``data-src``) the first one wins.
    """
    selected: List[Tuple[str, str]] = []
    seen = set()
    for name, value in attributes.items():
        if not is_merged_attribute(name):
            continue
        target = name.lower()
        target = RENAMED_ATTRIBUTES.get(target, target)
        if target in seen:
            continue
        seen.add(target)
        selected.append((target, _flatten(value)))
    return selected


def _existing_name(root: Tag, name: str) -> Optional[str]:
    for existing in root.attrs:
        if str(existing).lower() == name:
            return existing
    return None


def apply_attributes(root: Tag, attributes: Iterable[Tuple[str, str]]) -> Tag:
    """Set each attribute on ``root``, replacing a same-named one in place."""
    for name, value in attributes:
        existing = _existing_name(root, name)
        root[existing if existing is not None else name] = value
    return root


def merge_attributes(
    reference_attributes: Mapping[str, AttributeValue],
    svg_markup: str,
) -> str:
    """Return a copy of ``svg_markup`` carrying the reference's attributes.

    ``svg_markup`` is expected to be sanitized already. Values are escaped by
    the serializer. Markup without an ``<svg>`` root is returned as is.
    """
    if not svg_markup or not svg_markup.strip():
        return svg_markup
    soup = parse_svg(svg_markup)
    root = soup.find("svg")
    if root is None:
        return svg_markup
    apply_attributes(root, select_attributes(reference_attributes))
    return root.decode()
