"""Tests for config file loading."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import pytest

from feedclean.config.loader import (
    ConfigLoadError,
    _cache_get,
    _cache_set,
    clear_config_cache,
    load_config_dict,
    load_json_file,
)


class TestConfigLoadError:
    """Tests for ConfigLoadError exception."""

    def test_file_not_found(self, tmp_path: Path) -> None:
        """Test FileNotFoundError is wrapped."""
        with pytest.raises(ConfigLoadError, match="not found"):
            load_json_file(tmp_path / "nonexistent.json")

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="chmod doesn't restrict reads on Windows or for root",
    )
    def test_permission_denied(self, tmp_path: Path) -> None:
        """Test PermissionError is wrapped."""
        restricted_file = tmp_path / "restricted.json"
        restricted_file.write_text('{"remove_div": false}')
        restricted_file.chmod(0o000)

        try:
            with pytest.raises(ConfigLoadError, match="Permission denied"):
                load_json_file(restricted_file)
        finally:
            # Restore permissions for cleanup
            restricted_file.chmod(0o644)

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test JSONDecodeError is wrapped."""
        invalid_file = tmp_path / "invalid.json"
        invalid_file.write_text("{ not valid json }")

        with pytest.raises(ConfigLoadError, match="Invalid JSON"):
            load_json_file(invalid_file)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test empty file produces ConfigLoadError."""
        empty_file = tmp_path / "empty.json"
        empty_file.write_text("")

        with pytest.raises(ConfigLoadError, match="Invalid JSON"):
            load_json_file(empty_file)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """Test top-level arrays are rejected."""
        list_file = tmp_path / "list.json"
        list_file.write_text('["script"]')

        with pytest.raises(ConfigLoadError, match="must contain a JSON object"):
            load_json_file(list_file)


class TestCacheLRU:
    """Tests for LRU cache behavior."""

    def test_cache_stores_value(self) -> None:
        """Test cache stores and retrieves values."""
        _cache_set("test_key", {"data": "value"})
        assert _cache_get("test_key") == {"data": "value"}

    def test_cache_returns_none_for_missing(self) -> None:
        """Test cache returns None for missing keys."""
        assert _cache_get("nonexistent") is None

    def test_cache_returns_copies(self) -> None:
        """Test callers cannot mutate cached values."""
        _cache_set("test_key", {"tags": ["script"]})

        _cache_get("test_key")["tags"].append("style")

        assert _cache_get("test_key") == {"tags": ["script"]}

    def test_cache_eviction(self) -> None:
        """Test cache evicts oldest entries when full."""
        # Fill cache beyond limit (20 entries)
        for i in range(25):
            _cache_set(f"key_{i}", {"value": i})

        # First 5 entries should be evicted
        for i in range(5):
            assert _cache_get(f"key_{i}") is None

        for i in range(5, 25):
            assert _cache_get(f"key_{i}") == {"value": i}

    def test_cache_lru_order(self) -> None:
        """Test LRU access order is maintained."""
        for i in range(15):
            _cache_set(f"key_{i}", {"value": i})

        # Access key_0 to make it recently used
        _cache_get("key_0")

        for i in range(15, 25):
            _cache_set(f"key_{i}", {"value": i})

        assert _cache_get("key_0") is not None
        for i in range(1, 5):
            assert _cache_get(f"key_{i}") is None

    def test_clear(self) -> None:
        """Test clear_config_cache empties the cache."""
        _cache_set("test_key", {"data": "value"})
        clear_config_cache()
        assert _cache_get("test_key") is None


class TestLoadConfigDict:
    """Tests for merging custom config files over the defaults."""

    def test_defaults(self) -> None:
        """Test built-in defaults load without comment keys."""
        result = load_config_dict()

        assert "script" in result["strip_htmltags"]
        assert "onclick" in result["strip_attributes"]
        assert result["remove_div"] is True
        assert result["parser"] == "html.parser"
        assert not any(key.startswith("_") for key in result)

    def test_custom_overrides(self, tmp_path: Path) -> None:
        """Test custom values replace top-level defaults."""
        custom_file = tmp_path / "custom.json"
        custom_file.write_text(json.dumps({"remove_div": False, "https_domains": ["example.com"]}))

        result = load_config_dict(custom_file)

        assert result["remove_div"] is False
        assert result["https_domains"] == ["example.com"]
        # Untouched defaults are still there
        assert "script" in result["strip_htmltags"]

    def test_unknown_keys_ignored(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test unknown keys are dropped with a warning."""
        custom_file = tmp_path / "custom.json"
        custom_file.write_text(json.dumps({"strip_everything": True, "_comment": "notes"}))

        with caplog.at_level(logging.WARNING, logger="feedclean.config.loader"):
            result = load_config_dict(custom_file)

        assert "strip_everything" not in result
        assert "_comment" not in result
        assert "strip_everything" in caplog.text

    def test_results_are_cached(self, tmp_path: Path) -> None:
        """Test a file is read once until the cache is cleared."""
        custom_file = tmp_path / "custom.json"
        custom_file.write_text(json.dumps({"timeout": 3}))
        assert load_config_dict(custom_file)["timeout"] == 3

        custom_file.write_text(json.dumps({"timeout": 7}))
        assert load_config_dict(custom_file)["timeout"] == 3

        clear_config_cache()
        assert load_config_dict(custom_file)["timeout"] == 7

    def test_nonexistent_file(self) -> None:
        """Test nonexistent custom config raises error."""
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config_dict("/nonexistent/path/feedclean.json")
