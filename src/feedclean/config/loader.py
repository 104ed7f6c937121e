"""Configuration file loading.

Built-in defaults ship as ``defaults.json`` next to this module. A custom JSON
file can override any of its top-level keys.
"""

from __future__ import annotations

import copy
import json
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Maximum number of cache entries to prevent unbounded growth
_MAX_CACHE_SIZE = 20

_DEFAULTS_FILE = "defaults.json"

# LRU cache for loaded config dicts (OrderedDict for LRU behavior)
_config_cache: OrderedDict[str, dict[str, Any]] = OrderedDict()


class ConfigLoadError(Exception):
    """Raised when a configuration file cannot be loaded."""


def _cache_get(key: str) -> dict[str, Any] | None:
    """Get a copy of a cached value, moving it to end (most recently used)."""
    if key in _config_cache:
        _config_cache.move_to_end(key)
        return copy.deepcopy(_config_cache[key])
    return None


def _cache_set(key: str, value: dict[str, Any]) -> None:
    """Set value in cache with LRU eviction."""
    if key in _config_cache:
        _config_cache.move_to_end(key)
    _config_cache[key] = copy.deepcopy(value)
    while len(_config_cache) > _MAX_CACHE_SIZE:
        evicted_key = next(iter(_config_cache))
        _config_cache.pop(evicted_key)
        _LOGGER.debug("Config cache evicted: %s", evicted_key)


def _normalize_path(path: Path | str | None) -> str | None:
    """Normalize a path to an absolute string for cache key consistency."""
    if path is None:
        return None
    return str(Path(path).resolve())


def load_json_file(path: Path | str) -> dict[str, Any]:
    """Load a JSON object from a file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        ConfigLoadError: If the file cannot be read, parsed, or is not an object
    """
    path_str = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Config file not found: {path_str}") from e
    except PermissionError as e:
        raise ConfigLoadError(f"Permission denied reading config file: {path_str}") from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in config file {path_str}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config file {path_str} must contain a JSON object")
    return data


def load_config_dict(custom_path: Path | str | None = None) -> dict[str, Any]:
    """Load the built-in defaults, merged with a custom file if given.

    Keys starting with ``_`` are comments and are dropped. Keys unknown to the
    defaults are logged and ignored.

    Args:
        custom_path: Optional path to a JSON file overriding defaults

    Returns:
        Dict of option name to value

    Raises:
        ConfigLoadError: If either file cannot be loaded
    """
    normalized = _normalize_path(custom_path)
    cache_key = f"config:{normalized}"
    cached = _cache_get(cache_key)
    if cached is not None:
        return cached

    builtin = load_json_file(Path(__file__).parent / _DEFAULTS_FILE)
    merged = {k: v for k, v in builtin.items() if not k.startswith("_")}

    if custom_path:
        custom = load_json_file(custom_path)
        for key, value in custom.items():
            if key.startswith("_"):
                continue
            if key not in merged:
                _LOGGER.warning("Ignoring unknown config option %r in %s", key, custom_path)
                continue
            merged[key] = value

    _cache_set(cache_key, merged)
    return merged


def clear_config_cache() -> None:
    """Clear the config cache.

    Useful for testing or when config files have been modified.
    """
    _config_cache.clear()
