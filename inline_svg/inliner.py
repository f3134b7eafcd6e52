"""High-level orchestration: turn SVG <img> references into inline markup."""

from __future__ import annotations

import logging
from typing import List, Optional

from .attributes import merge_attributes
from .cache import MemoryCacheBackend, SvgCache
from .config import InlineSvgConfig
from .content import find_svg_references
from .errors import (
    CrossOriginRejected,
    FetchError,
    NoReferenceFound,
    SanitizationEmpty,
)
from .fetcher import SvgFetcher
from .models import SvgReference
from .sanitizer import sanitize_svg
from .utils import SVG_SUFFIX, url_host

logger = logging.getLogger("inline_svg")


class SvgInliner:
    """Replace same-origin SVG images in rendered content with sanitized inline SVG.

    ``render`` never raises: any reference that cannot be inlined is left in
    place. Failed fetches and failed sanitization are logged and not cached, so
    the next render tries again.
    """

    def __init__(
        self,
        config: InlineSvgConfig,
        cache: Optional[SvgCache] = None,
        fetcher: Optional[SvgFetcher] = None,
    ) -> None:
        self.config = config
        self.cache = cache or SvgCache(
            MemoryCacheBackend(),
            prefix=config.cache_prefix,
            ttl=config.cache_ttl,
        )
        self.fetcher = fetcher or SvgFetcher(config)

    def _collect(self, fragment: str) -> List[SvgReference]:
        references = find_svg_references(fragment, self.config.site_url)
        if not references:
            raise NoReferenceFound("No SVG image reference in fragment")
        return references

    def check_origin(self, reference: SvgReference) -> None:
        host = url_host(reference.locator)
        if host != self.config.site_host:
            raise CrossOriginRejected(reference.locator, host, self.config.site_host)

    def load_svg(self, locator: str) -> str:
        """Return sanitized markup for ``locator``, from the cache when possible.

        Raises ``FetchError`` or ``SanitizationEmpty``; neither outcome is cached.
        """
        cached = self.cache.get(locator)
        if cached is not None:
            logger.debug("Cache hit for %s", locator)
            return cached

        raw = self.fetcher.fetch(locator)
        markup = sanitize_svg(raw)
        if not markup:
            raise SanitizationEmpty(locator)
        self.cache.put(locator, markup)
        return markup

    def inline_reference(self, reference: SvgReference) -> Optional[str]:
        """Return merged inline markup for one reference, or None to keep the <img>."""
        try:
            self.check_origin(reference)
            markup = self.load_svg(reference.locator)
        except CrossOriginRejected as exc:
            logger.debug("%s", exc)
            return None
        except FetchError as exc:
            logger.warning("Failed to fetch SVG %s: %s", reference.locator, exc)
            return None
        except SanitizationEmpty as exc:
            logger.warning("%s", exc)
            return None
        return merge_attributes(reference.attributes, markup)

    def render(self, fragment: str) -> str:
        """Return ``fragment`` with its SVG images inlined, or unchanged."""
        if not fragment or SVG_SUFFIX not in fragment.lower():
            return fragment
        try:
            references = self._collect(fragment)
        except NoReferenceFound:
            return fragment

        pieces: List[str] = []
        cursor = 0
        for reference in references:
            try:
                markup = self.inline_reference(reference)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Unexpected error inlining %s", reference.locator)
                continue
            if markup is None:
                continue
            pieces.append(fragment[cursor : reference.start])
            pieces.append(markup)
            cursor = reference.end

        if not pieces:
            return fragment
        logger.debug("Inlined %d SVG image(s)", len(pieces) // 2)
        pieces.append(fragment[cursor:])
        return "".join(pieces)

    def deactivate(self) -> int:
        """Lifecycle hook: drop every cached SVG owned by this inliner."""
        return self.cache.invalidate_all()

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "SvgInliner":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
