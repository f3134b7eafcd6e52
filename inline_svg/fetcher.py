"""Retrieval of raw SVG bytes over HTTP."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import InlineSvgConfig
from .errors import EmptyBody, HttpError, ResponseTooLarge, TransportError
from .utils import is_svg_locator

logger = logging.getLogger("inline_svg")

CHUNK_SIZE = 8192


class SvgFetcher:
    """Single-attempt GET of an SVG resource.

    Failures raise a ``FetchError`` subclass. Nothing is retried and nothing is
    remembered, so the next call for the same locator tries again.
    """

    def __init__(
        self,
        config: InlineSvgConfig,
        session: Optional[Any] = None,
    ) -> None:
        self.config = config
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def should_verify(self, locator: str) -> bool:
        """Certificate verification is relaxed only for SVGs on local dev sites."""
        return not (self.config.is_local_site and is_svg_locator(locator))

    def fetch(self, locator: str) -> bytes:
        verify = self.should_verify(locator)
        if not verify:
            logger.debug("TLS verification disabled for local SVG %s", locator)
        try:
            resp = self.session.get(
                locator,
                timeout=self.config.fetch_timeout,
                verify=verify,
                stream=True,
            )
        except requests.RequestException as exc:
            raise TransportError(locator, exc) from exc

        try:
            if resp.status_code != 200:
                raise HttpError(locator, resp.status_code)
            data = self._read_body(locator, resp)
        finally:
            resp.close()

        if not data.strip():
            raise EmptyBody(locator)
        logger.debug("Fetched %d bytes from %s", len(data), locator)
        return data

    def _read_body(self, locator: str, resp: Any) -> bytes:
        """Read at most ``max_bytes`` of the body, failing as soon as it is exceeded."""
        limit = self.config.max_bytes
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise ResponseTooLarge(locator, int(declared), limit)
        body = bytearray()
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > limit:
                    raise ResponseTooLarge(locator, len(body), limit)
        except requests.RequestException as exc:
            raise TransportError(locator, exc) from exc
        return bytes(body)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "SvgFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
