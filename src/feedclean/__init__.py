"""Feed content sanitization library.

This library cleans HTML/XHTML fragments taken from syndication feeds so
they can be embedded in a trusted page:
- Stripping or encoding dangerous tags, stripping/renaming/adding attributes
- Rewriting relative URLs to absolute ones against the feed's base URI
- Upgrading http:// URLs to https:// for configured domains
- Optionally proxying remote images through a local cache

Core sanitization depends only on beautifulsoup4.
Optional features require: typer (cli).

Example usage:
    from feedclean import ContentType, Sanitizer

    sanitizer = Sanitizer()
    sanitizer.set_https_domains(["example.com"])
    clean = sanitizer.sanitize(raw_html, ContentType.HTML, base="https://example.com/feed")

    # One-shot
    from feedclean import sanitize_fragment
    clean = sanitize_fragment("<script>evil()</script>ok")
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export public API for convenience
from feedclean.config import ConfigurationError, SanitizerConfig, load_config
from feedclean.constructs import ContentType
from feedclean.domains import HttpsDomainTree
from feedclean.sanitization import ParserUnavailableError, Sanitizer, sanitize_fragment

__all__ = [
    "__version__",
    "ConfigurationError",
    "ContentType",
    "HttpsDomainTree",
    "ParserUnavailableError",
    "Sanitizer",
    "SanitizerConfig",
    "load_config",
    "sanitize_fragment",
]
