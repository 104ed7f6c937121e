"""Key/value data cache for proxied images.

Cache entries are ``{"headers": {...}, "body": bytes}`` dicts keyed by a
filtered form of the image URL. :class:`FileDataCache` keeps one JSON file per
key; any object implementing :class:`DataCache` can be injected instead.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable

_LOGGER = logging.getLogger(__name__)

_ENTRY_SUFFIX = ".spc"


class CacheWriteError(OSError):
    """Raised when a cache entry cannot be written."""


class DataCache(Protocol):
    """Minimal cache interface used by the image proxy."""

    def get_data(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key`` or ``default`` if absent/expired."""
        ...

    def set_data(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        """Store ``value`` under ``key`` for ``ttl`` seconds; return success."""
        ...


@runtime_checkable
class NameFilter(Protocol):
    """Turns an image URL into a cache key."""

    def filter(self, name: str) -> str:
        """Return the cache key for ``name``."""
        ...


class CallableNameFilter:
    """Name filter wrapping a plain ``str -> str`` callable."""

    def __init__(self, func: Callable[[str], str]) -> None:
        self.func = func

    def filter(self, name: str) -> str:
        return str(self.func(name))


class HashNameFilter:
    """Name filter producing the hex digest of a hashlib algorithm (md5 by default)."""

    def __init__(self, algorithm: str = "md5") -> None:
        # Fail early on unknown algorithms
        hashlib.new(algorithm)
        self.algorithm = algorithm

    def filter(self, name: str) -> str:
        return hashlib.new(self.algorithm, name.encode("utf-8")).hexdigest()


NameFilterSpec = Union[str, Callable[[str], str], NameFilter]


def make_name_filter(spec: NameFilterSpec) -> NameFilter:
    """Build a name filter from a hashlib algorithm name, a callable or a NameFilter.

    Args:
        spec: ``"md5"``/``"sha1"``/..., a ``str -> str`` callable, or an
            object with a ``filter(name)`` method

    Returns:
        A NameFilter

    Raises:
        TypeError: If ``spec`` is none of the accepted kinds
        ValueError: If ``spec`` names an unknown hash algorithm
    """
    if isinstance(spec, NameFilter):
        return spec
    if isinstance(spec, str):
        return HashNameFilter(spec)
    if callable(spec):
        return CallableNameFilter(spec)
    raise TypeError(
        f"cache_name_function must be a hash algorithm name, a callable or a NameFilter, got {type(spec).__name__}"
    )


class FileDataCache:
    """Filesystem cache storing one JSON document per key.

    Bodies are stored base64-encoded next to an absolute expiry timestamp.
    Expired entries read as absent and are removed lazily.

    Args:
        location: Directory holding the cache files (created on first write)
    """

    def __init__(self, location: Path | str) -> None:
        self.location = Path(location)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.location)!r})"

    def _path(self, key: str) -> Path:
        return self.location / f"{key}{_ENTRY_SUFFIX}"

    def get_data(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                stored = json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, json.JSONDecodeError) as e:
            _LOGGER.debug("Unreadable cache entry %s: %s", path, e)
            return default

        try:
            expired = not isinstance(stored, dict) or stored.get("expires", 0) < time.time()
            if not expired:
                body = base64.b64decode(stored.get("body", ""))
        except (binascii.Error, ValueError, TypeError) as e:
            _LOGGER.debug("Corrupt cache entry %s: %s", path, e)
            return default

        if expired:
            _LOGGER.debug("Cache entry expired: %s", key)
            path.unlink(missing_ok=True)
            return default

        return {"headers": stored.get("headers", {}), "body": body}

    def set_data(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        """Write ``value`` atomically; return False if the location is not writable."""
        try:
            self._write(key, value, ttl)
        except CacheWriteError as e:
            _LOGGER.debug("%s", e)
            return False
        return True

    def _write(self, key: str, value: dict[str, Any], ttl: int) -> None:
        body = value.get("body", b"")
        if isinstance(body, str):
            body = body.encode("utf-8")
        document = {
            "expires": time.time() + ttl,
            "headers": dict(value.get("headers", {})),
            "body": base64.b64encode(body).decode("ascii"),
        }
        try:
            self.location.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.location, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_name, self._path(key))
        except OSError as e:
            raise CacheWriteError(f"Cannot write cache entry {key} to {self.location}: {e}") from e
