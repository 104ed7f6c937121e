"""Sanitizer configuration.

Exports:
    - SanitizerConfig: Frozen options snapshot for a sanitize call
    - load_config: Build a config from defaults, a JSON file and overrides
    - ConfigurationError: Invalid option value
    - ConfigLoadError: Unreadable config file
"""

from __future__ import annotations

from feedclean.config.loader import (
    ConfigLoadError,
    clear_config_cache,
    load_config_dict,
    load_json_file,
)
from feedclean.config.models import (
    ConfigurationError,
    SanitizerConfig,
    load_config,
    parse_add_attributes,
    parse_name_list,
    parse_url_replacements,
)

__all__ = [
    # Loading
    "load_config",
    "load_config_dict",
    "load_json_file",
    "clear_config_cache",
    "ConfigLoadError",
    # Config value
    "SanitizerConfig",
    "ConfigurationError",
    "parse_name_list",
    "parse_add_attributes",
    "parse_url_replacements",
]
