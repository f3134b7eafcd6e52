"""Data models used throughout the inlining pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional


@dataclass(frozen=True)
class AllowList:
    """Element name -> permitted attribute names.

    Lookups are ASCII case-insensitive so ``viewBox`` and ``viewbox`` are one
    entry.
    """

    elements: Mapping[str, FrozenSet[str]]

    def __post_init__(self) -> None:
        normalized = {
            name.lower(): frozenset(attr.lower() for attr in attrs)
            for name, attrs in self.elements.items()
        }
        object.__setattr__(self, "elements", MappingProxyType(normalized))

    def allows_element(self, name: str) -> bool:
        return name.lower() in self.elements

    def allows_attribute(self, element: str, attribute: str) -> bool:
        allowed = self.elements.get(element.lower())
        return allowed is not None and attribute.lower() in allowed


@dataclass(frozen=True)
class CacheEntry:
    """Sanitized markup stored under a cache key for ``ttl`` seconds."""

    key: str
    value: str
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class SvgReference:
    """An <img> in host content that points at an SVG file."""

    src: str
    locator: str
    attributes: Dict[str, str] = field(default_factory=dict)
    # Offsets of the <img> start tag in the host fragment.
    start: Optional[int] = None
    end: Optional[int] = None


@dataclass
class UploadedFile:
    """A file handed over by the upload hook before it is persisted."""

    filename: str
    content: bytes
    mime_type: Optional[str]
    error: Optional[str] = None
