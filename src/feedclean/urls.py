"""URL absolutization against a fragment's base URI."""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

_LOGGER = logging.getLogger(__name__)


def absolutize_url(url: str, base: str) -> str | None:
    """Resolve ``url`` against ``base``.

    Args:
        url: Relative or absolute URL (may be empty)
        base: Base URI of the document the URL came from

    Returns:
        The absolute URL, or None if it cannot be resolved: the URL is
        malformed, or it is relative and ``base`` has no scheme.

    Example:
        >>> absolutize_url("/a", "https://ex.com/feed")
        'https://ex.com/a'
        >>> absolutize_url("/a", "") is None
        True
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        _LOGGER.debug("Unparseable URL left unresolved: %r", url)
        return None

    if parts.scheme:
        return url

    try:
        base_parts = urlsplit(base)
    except ValueError:
        _LOGGER.debug("Unparseable base URI: %r", base)
        return None

    if not base_parts.scheme:
        return None

    try:
        return urljoin(base, url)
    except ValueError:
        _LOGGER.debug("Could not resolve %r against %r", url, base)
        return None
