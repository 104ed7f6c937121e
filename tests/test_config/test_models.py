"""Tests for the SanitizerConfig value and option parsing."""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path

import pytest

from feedclean.cache import CallableNameFilter, HashNameFilter
from feedclean.config import (
    ConfigLoadError,
    ConfigurationError,
    SanitizerConfig,
    load_config,
    parse_add_attributes,
    parse_name_list,
    parse_url_replacements,
)

# fmt: off
NAME_LIST_CASES = [
    ("script,style",             ("script", "style"),   "comma_string"),
    (" Script , STYLE ",         ("script", "style"),   "trim_and_lower"),
    (["IFRAME", " embed "],      ("iframe", "embed"),   "list"),
    ("a,,b,",                    ("a", "b"),            "empty_items"),
    ("",                         (),                    "empty_string"),
    (None,                       (),                    "none"),
    ([],                         (),                    "empty_list"),
]
# fmt: on


class TestParsing:
    """Tests for option parsing helpers."""

    @pytest.mark.parametrize(("value", "expected", "desc"), NAME_LIST_CASES, ids=[c[2] for c in NAME_LIST_CASES])
    def test_parse_name_list(self, value, expected: tuple[str, ...], desc: str) -> None:
        """Test list options accept strings and lists."""
        assert parse_name_list(value) == expected, desc

    def test_parse_name_list_rejects_non_strings(self) -> None:
        """Test non-string names are rejected."""
        with pytest.raises(ConfigurationError):
            parse_name_list(["script", 3])

    def test_parse_add_attributes(self) -> None:
        """Test tag and attribute names are lower-cased."""
        assert parse_add_attributes({"VIDEO": {"Preload": "none"}}) == {"video": {"preload": "none"}}
        assert parse_add_attributes(None) == {}

    def test_parse_add_attributes_rejects_lists(self) -> None:
        """Test non-mapping values are rejected."""
        with pytest.raises(ConfigurationError):
            parse_add_attributes({"video": ["preload"]})

    def test_parse_url_replacements(self) -> None:
        """Test single attributes are turned into tuples."""
        assert parse_url_replacements({"A": "HREF", "img": ["src", "longdesc"]}) == {
            "a": ("href",),
            "img": ("src", "longdesc"),
        }

    def test_parse_url_replacements_defaults(self) -> None:
        """Test None restores the built-in map."""
        result = parse_url_replacements(None)

        assert result["a"] == ("href",)
        assert result["img"] == ("longdesc", "src")
        assert result["video"] == ("poster", "src")


class TestSanitizerConfig:
    """Tests for SanitizerConfig defaults and validation."""

    def test_defaults(self) -> None:
        """Test default option values."""
        config = SanitizerConfig()

        assert "script" in config.strip_htmltags
        assert "iframe" in config.strip_htmltags
        assert "onclick" in config.strip_attributes
        assert config.rename_attributes == ()
        assert config.add_attributes["video"] == {"preload": "none"}
        assert config.remove_div is True
        assert config.strip_comments is False
        assert config.encode_instead_of_strip is False
        assert config.output_encoding == "UTF-8"
        assert config.cache_duration == 3600
        assert config.image_handler == ""
        assert not config.domain_tree
        assert isinstance(config.name_filter, HashNameFilter)

    def test_frozen(self) -> None:
        """Test configs cannot be mutated in place."""
        config = SanitizerConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.remove_div = False  # type: ignore[misc]

    def test_replace_rebuilds_derived(self) -> None:
        """Test replace() rebuilds the domain tree and name filter."""
        config = SanitizerConfig().replace(https_domains=["example.com"], cache_name_function=str.upper)

        assert config.domain_tree.is_forced_https("www.example.com")
        assert isinstance(config.name_filter, CallableNameFilter)
        assert config.name_filter.filter("abc") == "ABC"

    def test_default_containers_not_shared(self) -> None:
        """Test each config gets its own mutable defaults."""
        first = SanitizerConfig()
        second = SanitizerConfig()

        assert first.add_attributes == second.add_attributes
        assert first.add_attributes is not second.add_attributes

    def test_is_utf8_output(self) -> None:
        """Test UTF-8 spellings are recognized."""
        assert SanitizerConfig(output_encoding="utf8").is_utf8_output
        assert not SanitizerConfig(output_encoding="latin-1").is_utf8_output

    def test_image_proxy_enabled(self) -> None:
        """Test proxying needs both a handler and caching."""
        assert not SanitizerConfig().image_proxy_enabled
        assert SanitizerConfig(image_handler="/i/").image_proxy_enabled
        assert not SanitizerConfig(image_handler="/i/", enable_cache=False).image_proxy_enabled

    # fmt: off
    INVALID_CASES = [
        ({"output_encoding": "no-such-charset"},  "Unknown output encoding",   "bad_encoding"),
        ({"cache_name_function": "no-such-hash"}, "cache_name_function",       "bad_hash"),
        ({"cache_name_function": 42},             "cache_name_function",       "bad_filter_type"),
        ({"https_domains": "example.com"},        "list of domains",           "domains_as_string"),
        ({"parser": ""},                          "parser",                    "empty_parser"),
        ({"cache_duration": -1},                  "cache_duration",            "negative_duration"),
        ({"redirects": -1},                       "redirects",                 "negative_redirects"),
    ]
    # fmt: on

    @pytest.mark.parametrize(("options", "match", "desc"), INVALID_CASES, ids=[c[2] for c in INVALID_CASES])
    def test_invalid(self, options: dict, match: str, desc: str) -> None:
        """Test invalid options raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match=match):
            SanitizerConfig(**options)

    def test_configuration_error_is_value_error(self) -> None:
        """Test ConfigurationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            SanitizerConfig(redirects=-1)

    def test_from_dict_ignores_unknown(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test from_dict warns about and skips unknown keys."""
        with caplog.at_level(logging.WARNING, logger="feedclean.config.models"):
            config = SanitizerConfig.from_dict({"remove_div": False, "bogus": 1, "_note": "x"})

        assert config.remove_div is False
        assert "bogus" in caplog.text
        assert "_note" not in caplog.text


class TestLoadConfig:
    """Tests for load_config function."""

    def test_without_file(self) -> None:
        """Test defaults plus keyword overrides."""
        config = load_config(https_domains=["example.com"])

        assert config.domain_tree.is_forced_https("example.com")
        assert config.remove_div is True

    def test_file_and_overrides(self, tmp_path: Path) -> None:
        """Test keyword overrides win over the file."""
        config_file = tmp_path / "feedclean.json"
        config_file.write_text(json.dumps({"strip_htmltags": "b,i", "remove_div": False, "timeout": 4}))

        config = load_config(config_file, timeout=9)

        assert config.strip_htmltags == ("b", "i")
        assert config.remove_div is False
        assert config.timeout == 9

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises ConfigLoadError."""
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path / "missing.json")

    def test_invalid_value_in_file(self, tmp_path: Path) -> None:
        """Test invalid values in a file raise ConfigurationError."""
        config_file = tmp_path / "feedclean.json"
        config_file.write_text(json.dumps({"output_encoding": "klingon"}))

        with pytest.raises(ConfigurationError):
            load_config(config_file)
