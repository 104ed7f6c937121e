"""Pytest configuration and fixtures for feedclean tests."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from feedclean.cache import CacheWriteError
from feedclean.config import clear_config_cache
from feedclean.httpclient import HttpFetchError, Response


class FakeHttpClient:
    """HttpClient returning canned responses and recording requests."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"\x89PNG",
        headers: dict[str, str] | None = None,
        requested_uri: str | None = None,
        fail: bool = False,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.headers = headers if headers is not None else {"content-type": "image/png"}
        self.requested_uri = requested_uri
        self.fail = fail
        self.requests: list[tuple[str, str, dict[str, str]]] = []

    def request(self, method: str, url: str, headers: Mapping[str, str] | None = None) -> Response:
        self.requests.append((method, url, dict(headers or {})))
        if self.fail:
            raise HttpFetchError(f"Cannot fetch {url}", url)
        return Response(
            status_code=self.status_code,
            headers=dict(self.headers),
            body=self.body,
            requested_uri=self.requested_uri if self.requested_uri is not None else url,
        )


class MemoryCache:
    """DataCache keeping entries in a dict."""

    def __init__(self, writable: bool = True, raise_on_write: bool = False) -> None:
        self.entries: dict[str, dict[str, Any]] = {}
        self.ttls: dict[str, int] = {}
        self.writable = writable
        self.raise_on_write = raise_on_write

    def get_data(self, key: str, default: Any = None) -> Any:
        return self.entries.get(key, default)

    def set_data(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        if self.raise_on_write:
            raise CacheWriteError(f"Cannot write {key}")
        if not self.writable:
            return False
        self.entries[key] = value
        self.ttls[key] = ttl
        return True


@pytest.fixture
def fake_http_client():
    """Create a FakeHttpClient with the given behavior."""

    def _create(**kwargs: Any) -> FakeHttpClient:
        return FakeHttpClient(**kwargs)

    return _create


@pytest.fixture
def memory_cache():
    """Create a MemoryCache with the given behavior."""

    def _create(**kwargs: Any) -> MemoryCache:
        return MemoryCache(**kwargs)

    return _create


@pytest.fixture
def fragment_file(tmp_path: Path):
    """Write a fragment to a temporary file."""

    def _create(content: str, name: str = "item.html") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _create


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Keep loaded config files from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()
