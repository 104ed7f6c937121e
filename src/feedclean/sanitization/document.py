"""Loading fragments into a document tree and serializing them back.

A fragment is wrapped in a minimal HTML (or XHTML) document shell so the
parser treats it as body content, then the body's first child, the wrapper
``<div>``, is serialized on the way out.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, FeatureNotFound, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from feedclean.constructs import ContentType

_LOGGER = logging.getLogger(__name__)

# <html> and <body> tags in the fragment itself would end up in our shell
_HTML_BODY_TAG_RE = re.compile(r"</?(?:html|body)[^>]*?>", re.IGNORECASE | re.DOTALL)
_OPEN_DIV_RE = re.compile(r"^<div(?:[\t\n\x0b\x0c\r ][^>]*)?>")
_CLOSE_DIV_RE = re.compile(r"</div>$")

_HTML_DOCTYPE = "<!DOCTYPE html>"
_XHTML_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
)

# Void elements without the trailing slash; only &, < and > escaped in text
HTML_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)
XHTML_FORMATTER = "minimal"


class ParserUnavailableError(RuntimeError):
    """Raised when the configured HTML tree builder is not installed."""

    def __init__(self, parser: str) -> None:
        self.parser = parser
        super().__init__(f"HTML parser {parser!r} is not available, unable to sanitize HTML content")


def is_xhtml_only(content_type: ContentType) -> bool:
    """True if the construct is XHTML and nothing else."""
    return content_type == ContentType.XHTML


def preprocess(html: str, content_type: ContentType) -> str:
    """Wrap a fragment in a document shell matching its content type.

    HTML fragments are additionally wrapped in a ``<div>``; Atom XHTML
    content already comes wrapped in one.

    Example:
        >>> preprocess("<p>x</p>", ContentType.HTML)  # doctest: +ELLIPSIS
        '<!DOCTYPE html><html><head>...</head><body><div><p>x</p></div></body></html>'
    """
    html = _HTML_BODY_TAG_RE.sub("", html)
    if is_xhtml_only(content_type):
        doctype = _XHTML_DOCTYPE
        mime_type = "application/xhtml+xml"
    else:
        # No protection against a stray </div> closing the wrapper early
        html = f"<div>{html}</div>"
        doctype = _HTML_DOCTYPE
        mime_type = "text/html"

    return (
        f"{doctype}<html><head>"
        f'<meta http-equiv="Content-Type" content="{mime_type}; charset=utf-8" />'
        f"</head><body>{html}</body></html>"
    )


def load_document(markup: str, parser: str) -> BeautifulSoup:
    """Parse a preprocessed document.

    Attribute values are kept as plain strings (no class/rel splitting).

    Raises:
        ParserUnavailableError: If ``parser`` is not an installed tree builder
    """
    try:
        return BeautifulSoup(markup, parser, multi_valued_attributes=None)
    except FeatureNotFound as e:
        raise ParserUnavailableError(parser) from e


def fragment_root(soup: BeautifulSoup) -> Tag:
    """Return the element holding the fragment content (the body)."""
    body = soup.body
    if body is None:
        # Only happens with builders that do not synthesize a body
        return soup
    return body


def serialize_fragment(soup: BeautifulSoup, content_type: ContentType, *, remove_div: bool = True) -> str:
    """Serialize the processed fragment and deal with the wrapper ``<div>``.

    Args:
        soup: Parsed and filtered document
        content_type: Content type the document was preprocessed with
        remove_div: Drop the wrapper div; when False it is kept as a bare ``<div>``

    Returns:
        The fragment markup, trimmed
    """
    formatter = XHTML_FORMATTER if is_xhtml_only(content_type) else HTML_FORMATTER
    root = fragment_root(soup)
    first = root.contents[0] if root.contents else None

    if not isinstance(first, Tag) or first.name != "div":
        # The wrapper was stripped as a tag, or XHTML content came without one
        _LOGGER.debug("Fragment has no wrapper div, serializing whole body")
        return root.decode_contents(formatter=formatter).strip()

    data = first.decode(formatter=formatter).strip()
    if remove_div:
        data = _OPEN_DIV_RE.sub("", data, count=1)
        data = _CLOSE_DIV_RE.sub("", data, count=1)
    else:
        data = _OPEN_DIV_RE.sub("<div>", data, count=1)
    return data
