"""Sanitizer configuration value.

A :class:`SanitizerConfig` is frozen: a sanitize call reads one snapshot of it
from start to finish. Changing options means building a new config, either
with :func:`dataclasses.replace` or through the setters on
:class:`~feedclean.sanitization.Sanitizer`.
"""

from __future__ import annotations

import codecs
import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from feedclean.cache import NameFilter, NameFilterSpec, make_name_filter
from feedclean.config.loader import load_config_dict
from feedclean.domains import HttpsDomainTree

_LOGGER = logging.getLogger(__name__)

# Loaded once at import; every default below is a copy of these values
_DEFAULTS = load_config_dict()

DEFAULT_STRIP_HTMLTAGS: tuple[str, ...] = tuple(_DEFAULTS["strip_htmltags"])
DEFAULT_STRIP_ATTRIBUTES: tuple[str, ...] = tuple(_DEFAULTS["strip_attributes"])
DEFAULT_ADD_ATTRIBUTES: dict[str, dict[str, str]] = _DEFAULTS["add_attributes"]

NameList = Union[str, Iterable[str], None]


class ConfigurationError(ValueError):
    """Raised when an option has an invalid type or value."""


def parse_name_list(value: NameList) -> tuple[str, ...]:
    """Normalize a list option.

    Accepts a list or a comma-separated string. Names are stripped and
    lower-cased; a falsy value yields an empty tuple (stage disabled).

    Example:
        >>> parse_name_list("Script, STYLE")
        ('script', 'style')
    """
    if not value:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    names = []
    for item in items:
        if not isinstance(item, str):
            raise ConfigurationError(f"Expected a tag or attribute name, got {item!r}")
        name = item.strip().lower()
        if name:
            names.append(name)
    return tuple(names)


def parse_add_attributes(value: Mapping[str, Mapping[str, str]] | None) -> dict[str, dict[str, str]]:
    """Normalize the per-tag attribute map used to force-set attributes."""
    if not value:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"add_attributes must be a mapping of tag to attributes, got {value!r}")
    result: dict[str, dict[str, str]] = {}
    for tag, pairs in value.items():
        if not isinstance(pairs, Mapping):
            raise ConfigurationError(f"add_attributes[{tag!r}] must be a mapping, got {pairs!r}")
        result[tag.strip().lower()] = {str(k).lower(): str(v) for k, v in pairs.items()}
    return result


def parse_url_replacements(value: Mapping[str, str | Iterable[str]] | None) -> dict[str, tuple[str, ...]]:
    """Normalize the element to URL-attribute map.

    ``None`` restores the built-in map; each value may be one attribute name
    or a list of them.
    """
    if value is None:
        value = _DEFAULTS["url_replacements"]
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"url_replacements must be a mapping of tag to attributes, got {value!r}")
    result: dict[str, tuple[str, ...]] = {}
    for tag, attributes in value.items():
        if isinstance(attributes, str):
            attributes = [attributes]
        result[tag.strip().lower()] = tuple(a.strip().lower() for a in attributes)
    return result


@dataclass(frozen=True)
class SanitizerConfig:
    """Options for one sanitize call.

    Attributes:
        strip_htmltags: Tags removed (or encoded) from the fragment
        strip_attributes: Attributes removed from every element
        rename_attributes: Attributes moved to ``data-sanitized-<name>``
        add_attributes: Attributes force-set per tag name
        strip_comments: Remove HTML comments
        encode_instead_of_strip: HTML-encode stripped tags instead of dropping them
        remove_div: Drop the synthetic wrapper ``<div>`` from the output
        output_encoding: Character encoding the output must be representable in
        url_replacements: Element name to URL-bearing attributes
        https_domains: Domains whose ``http://`` URLs are upgraded to HTTPS
        enable_cache: Allow image caching
        cache_location: Directory for the default file cache
        cache_name_function: Hash algorithm name, callable or NameFilter for cache keys
        cache_duration: Cache TTL in seconds
        image_handler: URL prefix of the image proxy endpoint (empty disables it)
        timeout: Image fetch timeout in seconds
        redirects: Maximum redirects followed per image
        useragent: User-Agent for image fetches
        transport_options: Extra HTTP client options
        parser: BeautifulSoup tree builder feature name
    """

    strip_htmltags: tuple[str, ...] = DEFAULT_STRIP_HTMLTAGS
    strip_attributes: tuple[str, ...] = DEFAULT_STRIP_ATTRIBUTES
    rename_attributes: tuple[str, ...] = field(default_factory=lambda: tuple(_DEFAULTS["rename_attributes"]))
    add_attributes: dict[str, dict[str, str]] = field(default_factory=lambda: dict(DEFAULT_ADD_ATTRIBUTES))
    strip_comments: bool = _DEFAULTS["strip_comments"]
    encode_instead_of_strip: bool = _DEFAULTS["encode_instead_of_strip"]
    remove_div: bool = _DEFAULTS["remove_div"]
    output_encoding: str = _DEFAULTS["output_encoding"]
    url_replacements: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(_DEFAULTS["url_replacements"]))
    https_domains: tuple[str, ...] = ()
    enable_cache: bool = _DEFAULTS["enable_cache"]
    cache_location: str = _DEFAULTS["cache_location"]
    cache_name_function: NameFilterSpec = _DEFAULTS["cache_name_function"]
    cache_duration: int = _DEFAULTS["cache_duration"]
    image_handler: str = _DEFAULTS["image_handler"]
    timeout: float = _DEFAULTS["timeout"]
    redirects: int = _DEFAULTS["redirects"]
    useragent: str = _DEFAULTS["useragent"]
    transport_options: dict[str, Any] = field(default_factory=lambda: dict(_DEFAULTS["transport_options"]))
    parser: str = _DEFAULTS["parser"]

    # Derived from the options above
    domain_tree: HttpsDomainTree = field(init=False, repr=False, compare=False)
    name_filter: NameFilter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        setattr_ = object.__setattr__
        setattr_(self, "strip_htmltags", parse_name_list(self.strip_htmltags))
        setattr_(self, "strip_attributes", parse_name_list(self.strip_attributes))
        setattr_(self, "rename_attributes", parse_name_list(self.rename_attributes))
        setattr_(self, "add_attributes", parse_add_attributes(self.add_attributes))
        setattr_(self, "url_replacements", parse_url_replacements(self.url_replacements))

        if isinstance(self.https_domains, str):
            raise ConfigurationError("https_domains must be a list of domains, not a string")
        domains = tuple(self.https_domains or ())
        setattr_(self, "https_domains", domains)
        setattr_(self, "domain_tree", HttpsDomainTree(domains))

        try:
            setattr_(self, "name_filter", make_name_filter(self.cache_name_function))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid cache_name_function: {e}") from e

        try:
            codecs.lookup(self.output_encoding)
        except LookupError as e:
            raise ConfigurationError(f"Unknown output encoding: {self.output_encoding!r}") from e

        if not self.parser:
            raise ConfigurationError("parser must name a BeautifulSoup tree builder")
        if self.cache_duration < 0:
            raise ConfigurationError(f"cache_duration must be >= 0, got {self.cache_duration}")
        if self.redirects < 0:
            raise ConfigurationError(f"redirects must be >= 0, got {self.redirects}")

    @property
    def is_utf8_output(self) -> bool:
        """True if no transcoding step is needed."""
        return codecs.lookup(self.output_encoding).name == "utf-8"

    @property
    def image_proxy_enabled(self) -> bool:
        """True if images are to be cached and rewritten to the image handler."""
        return bool(self.image_handler) and self.enable_cache

    def replace(self, **changes: Any) -> SanitizerConfig:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SanitizerConfig:
        """Build a config from a plain dict, ignoring unknown keys."""
        known = {f.name for f in dataclasses.fields(cls) if f.init}
        options = {}
        for key, value in data.items():
            if key in known:
                options[key] = value
            elif not key.startswith("_"):
                _LOGGER.warning("Ignoring unknown config option: %s", key)
        return cls(**options)


def load_config(path: Path | str | None = None, **overrides: Any) -> SanitizerConfig:
    """Build a config from built-in defaults, an optional JSON file and keyword overrides.

    Args:
        path: Optional JSON file overriding defaults
        **overrides: Option values taking precedence over the file

    Returns:
        The resulting SanitizerConfig

    Raises:
        ConfigLoadError: If the file cannot be loaded
        ConfigurationError: If an option is invalid

    Example:
        >>> load_config(https_domains=["example.com"]).domain_tree.is_forced_https("example.com")
        True
    """
    data = load_config_dict(path)
    data.update(overrides)
    return SanitizerConfig.from_dict(data)
