"""Sanitize orchestrator.

Takes one feed construct (text, a base URI and its content-type flags) and
runs it through, in order:

1. ``MAYBE_HTML`` probing and base64 decoding
2. for HTML/XHTML: document shell, parsing, comment/tag/attribute filters,
   URL rewriting, image proxying, serialization
3. IRI absolutization and text escaping
4. output encoding
"""

from __future__ import annotations

import base64
import binascii
import html
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from feedclean.cache import DataCache, FileDataCache, NameFilterSpec
from feedclean.config import SanitizerConfig
from feedclean.config.models import (
    DEFAULT_ADD_ATTRIBUTES,
    DEFAULT_STRIP_ATTRIBUTES,
    DEFAULT_STRIP_HTMLTAGS,
    NameList,
)
from feedclean.constructs import ContentType, classify
from feedclean.httpclient import HttpClient, UrllibClient
from feedclean.sanitization.document import (
    fragment_root,
    load_document,
    preprocess,
    serialize_fragment,
)
from feedclean.sanitization.filters import add_attr, rename_attr, strip_attr, strip_comments, strip_tag
from feedclean.sanitization.images import ImageProxy
from feedclean.sanitization.rewrite import replace_urls
from feedclean.urls import absolutize_url

_LOGGER = logging.getLogger(__name__)

_MARKUP = ContentType.HTML | ContentType.XHTML
_ESCAPED = ContentType.TEXT | ContentType.IRI


def decode_base64(data: str) -> str:
    """Decode base64 content leniently.

    Characters outside the base64 alphabet are ignored and missing padding is
    added. Undecodable input yields an empty string.
    """
    compact = "".join(data.split())
    try:
        raw = base64.b64decode(compact + "=" * (-len(compact) % 4))
    except (binascii.Error, ValueError) as e:
        _LOGGER.debug("Undecodable base64 content: %s", e)
        return ""
    return raw.decode("utf-8", errors="replace")


def escape_text(data: str) -> str:
    """Escape ``&``, ``<``, ``>`` and double quotes; single quotes are kept."""
    return html.escape(data, quote=False).replace('"', "&quot;")


def transcode(data: str, encoding: str) -> str:
    """Make ``data`` representable in ``encoding``.

    Characters the codec cannot encode are replaced by numeric character
    references, so ``result.encode(encoding)`` always succeeds.

    Example:
        >>> transcode("snow \\u2603", "ascii")
        'snow &#9731;'
    """
    return data.encode(encoding, errors="xmlcharrefreplace").decode(encoding)


class Sanitizer:
    """Sanitizes feed constructs for embedding in a trusted page.

    Options live in an immutable :class:`SanitizerConfig`. The setter methods
    below swap in a new config; a sanitize call already running keeps the
    snapshot it started with. The HTTP client and data cache used for image
    proxying can be injected; otherwise defaults are built from the config.

    Args:
        config: Options (defaults if None)
        http_client: Client for image fetches
        cache: Data cache for proxied images

    Example:
        >>> s = Sanitizer()
        >>> s.sanitize('<p onclick="x()">hi <a href="/a">link</a></p>', ContentType.HTML, "https://ex.com/")
        '<p>hi <a href="https://ex.com/a">link</a></p>'
    """

    def __init__(
        self,
        config: SanitizerConfig | None = None,
        *,
        http_client: HttpClient | None = None,
        cache: DataCache | None = None,
    ) -> None:
        self.config = config if config is not None else SanitizerConfig()
        self.http_client = http_client
        self.cache = cache

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"

    # -- setters ---------------------------------------------------------------

    def _update(self, **changes: Any) -> None:
        self.config = self.config.replace(**changes)

    def remove_div(self, enable: bool = True) -> None:
        self._update(remove_div=bool(enable))

    def set_image_handler(self, page: str | None = None) -> None:
        """Set the image handler URL prefix; a falsy value disables proxying."""
        self._update(image_handler=str(page) if page else "")

    def pass_cache_data(
        self,
        enable_cache: bool | None = True,
        cache_location: str | None = None,
        cache_name_function: NameFilterSpec | None = None,
        cache: DataCache | None = None,
    ) -> None:
        """Configure image caching.

        Raises:
            ConfigurationError: If ``cache_name_function`` is of an unsupported type
        """
        changes: dict[str, Any] = {}
        if enable_cache is not None:
            changes["enable_cache"] = bool(enable_cache)
        if cache_location:
            changes["cache_location"] = str(cache_location)
        if cache_name_function is not None:
            changes["cache_name_function"] = cache_name_function
        self._update(**changes)
        if cache is not None:
            self.cache = cache

    def set_cache(self, cache: DataCache | None) -> None:
        self.cache = cache

    def set_http_client(self, http_client: HttpClient | None) -> None:
        self.http_client = http_client

    def pass_file_data(
        self,
        timeout: float | None = None,
        useragent: str | None = None,
        transport_options: Mapping[str, Any] | None = None,
        redirects: int | None = None,
    ) -> None:
        """Configure the default HTTP client used for image fetches."""
        changes: dict[str, Any] = {}
        if timeout:
            changes["timeout"] = timeout
        if useragent:
            changes["useragent"] = str(useragent)
        if transport_options is not None:
            changes["transport_options"] = dict(transport_options)
        if redirects is not None:
            changes["redirects"] = redirects
        self._update(**changes)

    def strip_htmltags(self, tags: NameList = DEFAULT_STRIP_HTMLTAGS) -> None:
        self._update(strip_htmltags=tags)

    def encode_instead_of_strip(self, encode: bool = False) -> None:
        self._update(encode_instead_of_strip=bool(encode))

    def rename_attributes(self, attribs: NameList = ()) -> None:
        self._update(rename_attributes=attribs)

    def strip_attributes(self, attribs: NameList = DEFAULT_STRIP_ATTRIBUTES) -> None:
        self._update(strip_attributes=attribs)

    def add_attributes(self, attribs: Mapping[str, Mapping[str, str]] | None = DEFAULT_ADD_ATTRIBUTES) -> None:
        self._update(add_attributes=attribs)

    def strip_comments(self, strip: bool = False) -> None:
        self._update(strip_comments=bool(strip))

    def set_output_encoding(self, encoding: str = "UTF-8") -> None:
        self._update(output_encoding=str(encoding))

    def set_url_replacements(self, element_attribute: Mapping[str, str | Iterable[str]] | None = None) -> None:
        """Set the element to URL-attribute map; None restores the defaults."""
        self._update(url_replacements=element_attribute)

    def set_https_domains(self, domains: Iterable[str]) -> None:
        """Set the forced-HTTPS domains.

        Raises:
            ConfigurationError: If ``domains`` is a single string instead of a list
        """
        if not isinstance(domains, str):
            domains = tuple(domains)
        self._update(https_domains=domains)

    def https_url(self, url: str) -> str:
        """Upgrade ``url`` to HTTPS if its host is a forced-HTTPS domain."""
        return self.config.domain_tree.https_url(url)

    # -- sanitizing ------------------------------------------------------------

    def sanitize(
        self,
        data: str,
        content_type: ContentType | int = ContentType.HTML,
        base: str = "",
        *,
        remote_addr: str | None = None,
    ) -> str:
        """Sanitize one feed construct.

        Args:
            data: Construct text
            content_type: ContentType flags describing ``data``
            base: Base URI for relative URLs
            remote_addr: Address of the reader, forwarded when fetching images

        Returns:
            The sanitized text

        Raises:
            ParserUnavailableError: HTML/XHTML content and no usable parser
        """
        config = self.config
        content_type = ContentType(content_type)

        data = data.strip()
        if not data and not content_type & ContentType.IRI:
            return ""

        content_type = classify(data, content_type)
        _LOGGER.debug("Sanitizing %d chars as %r", len(data), content_type)

        if content_type & ContentType.BASE64:
            data = decode_base64(data)

        if content_type & _MARKUP:
            data = self._sanitize_markup(data, content_type, base, config, remote_addr)

        if content_type & ContentType.IRI:
            absolute = absolutize_url(data, base)
            if absolute is not None:
                data = absolute

        if content_type & _ESCAPED:
            data = escape_text(data)

        if not config.is_utf8_output:
            data = transcode(data, config.output_encoding)

        return data

    def _sanitize_markup(
        self,
        data: str,
        content_type: ContentType,
        base: str,
        config: SanitizerConfig,
        remote_addr: str | None,
    ) -> str:
        soup = load_document(preprocess(data, content_type), config.parser)
        root = fragment_root(soup)

        if config.strip_comments:
            strip_comments(root)

        # Strip out HTML tags and attributes that might cause security problems
        xhtml = bool(content_type & ContentType.XHTML)
        for tag in config.strip_htmltags:
            strip_tag(root, tag, encode=config.encode_instead_of_strip, xhtml=xhtml)

        for attribute in config.rename_attributes:
            rename_attr(root, attribute)

        for attribute in config.strip_attributes:
            strip_attr(root, attribute)

        for tag, attributes in config.add_attributes.items():
            add_attr(root, tag, attributes)

        for tag, attributes in config.url_replacements.items():
            if tag in config.strip_htmltags:
                continue
            replace_urls(root, tag, attributes, base, config.domain_tree)

        if config.image_proxy_enabled:
            self._image_proxy(config).proxy_images(root, remote_addr)

        return serialize_fragment(soup, content_type, remove_div=config.remove_div)

    def _image_proxy(self, config: SanitizerConfig) -> ImageProxy:
        http_client = self.http_client
        if http_client is None:
            http_client = UrllibClient(
                timeout=config.timeout,
                redirects=config.redirects,
                useragent=config.useragent,
                transport_options=config.transport_options,
            )
        cache = self.cache if self.cache is not None else FileDataCache(config.cache_location)
        return ImageProxy(
            image_handler=config.image_handler,
            http_client=http_client,
            cache=cache,
            name_filter=config.name_filter,
            cache_duration=config.cache_duration,
            cache_location=config.cache_location,
        )


def sanitize_fragment(
    data: str,
    base: str = "",
    content_type: ContentType | int = ContentType.HTML,
    config: SanitizerConfig | None = None,
    **overrides: Any,
) -> str:
    """Sanitize one fragment with a throwaway :class:`Sanitizer`.

    Args:
        data: Fragment text
        base: Base URI for relative URLs
        content_type: ContentType flags describing ``data``
        config: Options (defaults if None)
        **overrides: Option values applied on top of ``config``

    Returns:
        The sanitized fragment

    Example:
        >>> sanitize_fragment("<script>evil()</script>ok")
        'ok'
    """
    config = config if config is not None else SanitizerConfig()
    if overrides:
        config = config.replace(**overrides)
    return Sanitizer(config).sanitize(data, content_type, base)


__all__ = [
    "Sanitizer",
    "decode_base64",
    "escape_text",
    "sanitize_fragment",
    "transcode",
]
