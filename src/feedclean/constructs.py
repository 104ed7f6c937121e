"""Content-type flags for feed constructs.

Feed elements declare how their text should be interpreted. The flags can be
combined, e.g. ``ContentType.HTML | ContentType.BASE64`` for base64-encoded
HTML, or ``ContentType.MAYBE_HTML`` when the feed format leaves it open and
the content has to be probed.
"""

from __future__ import annotations

import enum
import re

# An entity reference or a closing tag is taken as evidence of markup.
_HTML_PROBE_RE = re.compile(
    r"&(?:#(?:x[0-9a-fA-F]+|[0-9]+)|[a-zA-Z0-9]+)"
    r"|</[A-Za-z][^\t\n\x0b\x0c\r />]*"
    r"(?:[\t\n\x0b\x0c\r ]+[^\t\n\x0b\x0c\r />][^\t\n\x0b\x0c\r /=>]*"
    r"(?:[\t\n\x0b\x0c\r ]*=[\t\n\x0b\x0c\r ]*(?:\"[^\"]*\"|'[^']*'|[^\t\n\x0b\x0c\r \"'>][^\t\n\x0b\x0c\r >]*)?)?)*"
    r"[\t\n\x0b\x0c\r ]*>"
)


class ContentType(enum.IntFlag):
    """How the text of a feed construct is to be treated."""

    NONE = 0
    TEXT = 1
    HTML = 2
    XHTML = 4
    BASE64 = 8
    IRI = 16
    MAYBE_HTML = 32
    ALL = 63

    @classmethod
    def from_name(cls, name: str) -> ContentType:
        """Look up a flag by a CLI-style name such as ``maybe-html``."""
        key = name.strip().replace("-", "_").upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown content type: {name!r}") from None


def looks_like_html(data: str) -> bool:
    """Return True if ``data`` contains an entity reference or a closing tag.

    Example:
        >>> looks_like_html("Tom &amp; Jerry")
        True
        >>> looks_like_html("1 < 2")
        False
    """
    return _HTML_PROBE_RE.search(data) is not None


def classify(data: str, content_type: ContentType) -> ContentType:
    """Resolve ``MAYBE_HTML`` into ``HTML`` or ``TEXT`` for ``data``.

    Types without the ``MAYBE_HTML`` flag are returned unchanged.
    """
    if content_type & ContentType.MAYBE_HTML:
        if looks_like_html(data):
            content_type |= ContentType.HTML
        else:
            content_type |= ContentType.TEXT
    return content_type
