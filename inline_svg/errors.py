"""Exception types raised while inlining and sanitizing SVG images."""

from __future__ import annotations

from typing import Optional


class InlineSvgError(Exception):
    """Base class for every failure raised by the inline SVG pipeline."""


class FetchError(InlineSvgError):
    """The SVG could not be retrieved from its locator."""

    def __init__(self, locator: str, message: str) -> None:
        super().__init__(f"{message}: {locator}")
        self.locator = locator


class TransportError(FetchError):
    """Connection, DNS, TLS or timeout failure."""

    def __init__(self, locator: str, cause: Optional[BaseException] = None) -> None:
        detail = f"Transport error ({cause})" if cause else "Transport error"
        super().__init__(locator, detail)
        self.cause = cause


class HttpError(FetchError):
    """The server answered with a status other than 200."""

    def __init__(self, locator: str, status: int) -> None:
        super().__init__(locator, f"Unexpected HTTP status {status}")
        self.status = status


class EmptyBody(FetchError):
    def __init__(self, locator: str) -> None:
        super().__init__(locator, "Empty SVG content")


class ResponseTooLarge(FetchError):
    def __init__(self, locator: str, size: int, limit: int) -> None:
        super().__init__(locator, f"SVG larger than {limit} bytes ({size})")
        self.size = size
        self.limit = limit


class SanitizationEmpty(InlineSvgError):
    """Nothing recognisable as an SVG root survived sanitization."""

    def __init__(self, locator: str) -> None:
        super().__init__(f"Sanitization failed for SVG: {locator}")
        self.locator = locator


class CrossOriginRejected(InlineSvgError):
    def __init__(self, locator: str, host: Optional[str], site_host: str) -> None:
        super().__init__(
            f"Refusing to inline {locator}: host {host!r} does not match {site_host!r}"
        )
        self.locator = locator
        self.host = host
        self.site_host = site_host


class NoReferenceFound(InlineSvgError):
    """The fragment holds no <img> pointing at an SVG file."""


class UploadRejected(InlineSvgError):
    """An uploaded SVG could not be made safe and must not be stored."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(message)
        self.filename = filename
        self.message = message
