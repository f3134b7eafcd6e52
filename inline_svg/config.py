"""Configuration objects and constants for SVG inlining."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

DEFAULT_CACHE_TTL = 24 * 60 * 60
DEFAULT_FETCH_TIMEOUT = 15.0
DEFAULT_MAX_BYTES = 1024 * 1024
DEFAULT_CACHE_PREFIX = "inline_svg_"
DEFAULT_LOCAL_HOST_SUFFIX = ".local"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "inline-svg"


@dataclass
class InlineSvgConfig:
    """Settings shared by the fetcher, cache and inliner."""

    site_url: str
    cache_ttl: int = DEFAULT_CACHE_TTL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_bytes: int = DEFAULT_MAX_BYTES
    cache_prefix: str = DEFAULT_CACHE_PREFIX
    local_host_suffix: str = DEFAULT_LOCAL_HOST_SUFFIX
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR)

    def __post_init__(self) -> None:
        if not self.site_host:
            raise ValueError(f"site_url must be an absolute URL: {self.site_url!r}")
        if self.cache_ttl <= 0:
            raise ValueError("cache_ttl must be positive")
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")

    @property
    def site_host(self) -> str:
        return (urlparse(self.site_url).hostname or "").lower()

    @property
    def is_local_site(self) -> bool:
        """True when the site runs on a local development host (e.g. ``mysite.local``)."""
        suffix = self.local_host_suffix.lower()
        return bool(suffix) and self.site_host.endswith(suffix)

    @classmethod
    def from_env(
        cls,
        site_url: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "InlineSvgConfig":
        """Build a config from ``INLINE_SVG_*`` environment variables."""
        env = os.environ if environ is None else environ
        url = site_url or env.get("INLINE_SVG_SITE_URL")
        if not url:
            raise ValueError("No site URL given and INLINE_SVG_SITE_URL is not set")
        kwargs = {}
        if env.get("INLINE_SVG_CACHE_TTL"):
            kwargs["cache_ttl"] = int(env["INLINE_SVG_CACHE_TTL"])
        if env.get("INLINE_SVG_TIMEOUT"):
            kwargs["fetch_timeout"] = float(env["INLINE_SVG_TIMEOUT"])
        if env.get("INLINE_SVG_CACHE_DIR"):
            kwargs["cache_dir"] = Path(env["INLINE_SVG_CACHE_DIR"]).expanduser()
        return cls(site_url=url, **kwargs)
