from __future__ import annotations

from typing import Dict, List, Optional, Union

import pytest
import requests

from inline_svg.cache import MemoryCacheBackend, SvgCache
from inline_svg.config import InlineSvgConfig

ICON_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0"/></svg>'


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        size = self.chunk_size or chunk_size
        for offset in range(0, len(self.content), size):
            self.chunks_read += 1
            yield self.content[offset : offset + size]

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; answers from a url -> response table."""

    def __init__(
        self,
        responses: Optional[Dict[str, Union[FakeResponse, Exception]]] = None,
    ) -> None:
        self.responses = responses or {}
        self.calls: List[dict] = []
        self.closed = False

    def get(
        self,
        url: str,
        timeout: float = None,
        verify: bool = True,
        stream: bool = False,
    ) -> FakeResponse:
        self.calls.append(
            {"url": url, "timeout": timeout, "verify": verify, "stream": stream}
        )
        response = self.responses.get(url)
        if response is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


class StubFetcher:
    """Fetcher double that replays a queue of results per locator."""

    def __init__(self, results: Optional[Dict[str, list]] = None) -> None:
        self.results = results or {}
        self.calls: List[str] = []
        self.closed = False

    def fetch(self, locator: str) -> bytes:
        self.calls.append(locator)
        queue = self.results.get(locator)
        if not queue:
            raise AssertionError(f"unexpected fetch of {locator}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path) -> InlineSvgConfig:
    return InlineSvgConfig(site_url="https://example.com", cache_dir=tmp_path / "cache")


@pytest.fixture
def memory_backend(clock) -> MemoryCacheBackend:
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def cache(memory_backend, config) -> SvgCache:
    return SvgCache(memory_backend, prefix=config.cache_prefix, ttl=config.cache_ttl)
