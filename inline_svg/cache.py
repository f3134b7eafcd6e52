"""Time-expiring storage for sanitized SVG markup."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol
from urllib.parse import quote

from .config import DEFAULT_CACHE_PREFIX, DEFAULT_CACHE_TTL
from .models import CacheEntry
from .utils import digest

logger = logging.getLogger("inline_svg")

Clock = Callable[[], float]


class CacheBackend(Protocol):
    """Key-value storage with per-key ttl and prefix-based bulk delete."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: float) -> None:
        ...

    def delete_prefix(self, prefix: str) -> int:
        ...


class MemoryCacheBackend:
    """Process-local backend guarded by a lock; expired entries read as absent."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str, ttl: float) -> None:
        entry = CacheEntry(key=key, value=value, created_at=self._clock(), ttl=ttl)
        with self._lock:
            self._entries[key] = entry

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FileCacheBackend:
    """One JSON document per key inside ``directory``.

    Writes go through a temporary file and ``os.replace`` so readers never see
    a partial entry.
    """

    _SUFFIX = ".json"

    def __init__(self, directory: Path, clock: Clock = time.time) -> None:
        self.directory = Path(directory).expanduser()
        self._clock = clock

    def _path_for(self, key: str) -> Path:
        return self.directory / (quote(key, safe="") + self._SUFFIX)

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            entry = CacheEntry(
                key=payload["key"],
                value=payload["value"],
                created_at=float(payload["created_at"]),
                ttl=float(payload["ttl"]),
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return None
        if entry.key != key or entry.is_expired(self._clock()):
            path.unlink(missing_ok=True)
            return None
        return entry.value

    def set(self, key: str, value: str, ttl: float) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = {
            "key": key,
            "value": value,
            "created_at": self._clock(),
            "ttl": ttl,
        }
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle)
            os.replace(tmp_name, self._path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete_prefix(self, prefix: str) -> int:
        if not self.directory.is_dir():
            return 0
        pattern = quote(prefix, safe="") + "*" + self._SUFFIX
        removed = 0
        for path in self.directory.glob(pattern):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            removed += 1
        return removed


class SvgCache:
    """Sanitized SVG markup keyed by locator, stored under a reserved prefix."""

    def __init__(
        self,
        backend: CacheBackend,
        prefix: str = DEFAULT_CACHE_PREFIX,
        ttl: float = DEFAULT_CACHE_TTL,
    ) -> None:
        if not prefix:
            raise ValueError("A non-empty key prefix is required")
        self.backend = backend
        self.prefix = prefix
        self.ttl = ttl

    def key_for(self, locator: str) -> str:
        return self.prefix + digest(locator)

    def get(self, locator: str) -> Optional[str]:
        return self.backend.get(self.key_for(locator))

    def put(self, locator: str, markup: str, ttl: Optional[float] = None) -> None:
        self.backend.set(self.key_for(locator), markup, self.ttl if ttl is None else ttl)

    def invalidate_all(self) -> int:
        """Remove every entry under the prefix and return how many were dropped."""
        removed = self.backend.delete_prefix(self.prefix)
        logger.info("Removed %d cached SVG entries", removed)
        return removed
