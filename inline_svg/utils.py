"""Helpers for URL inspection and cache key derivation."""

from __future__ import annotations

import hashlib
from typing import Optional
from urllib.parse import urlparse

SVG_SUFFIX = ".svg"


def url_host(url: str) -> Optional[str]:
    """Return the lowercase hostname of ``url`` or None when it has none."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def is_svg_locator(url: str) -> bool:
    """True when the URL path ends with the ``.svg`` extension."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return path.lower().endswith(SVG_SUFFIX)


def digest(value: str) -> str:
    """Stable one-way digest used to build cache keys."""
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()
