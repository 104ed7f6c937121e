"""HTTP client abstraction used for image proxying.

The sanitizer only needs a single blocking GET per image. Anything with a
``request(method, url, headers)`` method returning a :class:`Response` can be
plugged in; :class:`UrllibClient` is the stdlib-backed default.
"""

from __future__ import annotations

import http.client
import logging
import socket
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

_LOGGER = logging.getLogger(__name__)

METHOD_GET = "GET"

DEFAULT_USER_AGENT = "feedclean/0.1 (+https://pypi.org/project/feedclean/)"


class HttpFetchError(Exception):
    """Raised when a request fails: network error, timeout or non-2xx status."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


@dataclass
class Response:
    """A completed HTTP response.

    Attributes:
        status_code: HTTP status of the final response
        headers: Response headers (lower-cased names)
        body: Raw response body
        requested_uri: URI the body was finally served from, after redirects
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    requested_uri: str = ""


class HttpClient(Protocol):
    """Anything able to perform a blocking request."""

    def request(self, method: str, url: str, headers: Mapping[str, str] | None = None) -> Response:
        """Send a request and return the response, raising HttpFetchError on failure."""
        ...


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Redirect handler with a configurable hop limit."""

    def __init__(self, max_redirections: int) -> None:
        super().__init__()
        self.max_redirections = max_redirections


class UrllibClient:
    """HTTP client built on ``urllib.request``.

    Args:
        timeout: Per-request timeout in seconds
        redirects: Maximum number of redirects to follow
        useragent: User-Agent header value (library default if empty)
        transport_options: Extra options. Supported keys:
            - ``verify_tls`` (bool, default True): verify HTTPS certificates
            - ``proxies`` (dict): scheme to proxy URL mapping
    """

    def __init__(
        self,
        timeout: float = 10,
        redirects: int = 5,
        useragent: str = "",
        transport_options: Mapping[str, Any] | None = None,
    ) -> None:
        self.timeout = timeout
        self.redirects = redirects
        self.useragent = useragent or DEFAULT_USER_AGENT
        self.transport_options = dict(transport_options or {})
        self._opener = self._build_opener()

    def _build_opener(self) -> urllib.request.OpenerDirector:
        handlers: list[urllib.request.BaseHandler] = [_LimitedRedirectHandler(self.redirects)]

        if not self.transport_options.get("verify_tls", True):
            # Allow self-signed certs
            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            handlers.append(urllib.request.HTTPSHandler(context=ctx))

        proxies = self.transport_options.get("proxies")
        if proxies is not None:
            handlers.append(urllib.request.ProxyHandler(dict(proxies)))

        unknown = set(self.transport_options) - {"verify_tls", "proxies"}
        if unknown:
            _LOGGER.warning("Ignoring unsupported transport options: %s", ", ".join(sorted(unknown)))

        return urllib.request.build_opener(*handlers)

    def request(self, method: str, url: str, headers: Mapping[str, str] | None = None) -> Response:
        """Perform a GET request.

        Args:
            method: HTTP method; only ``GET`` is supported
            url: URL to fetch
            headers: Extra request headers

        Returns:
            The response of the final hop

        Raises:
            ValueError: If ``method`` is not GET
            HttpFetchError: On network errors, timeouts and non-2xx statuses
        """
        if method != METHOD_GET:
            raise ValueError(f"UrllibClient only supports {METHOD_GET} requests, got {method!r}")

        req_headers = {"User-Agent": self.useragent}
        req_headers.update(headers or {})

        try:
            req = urllib.request.Request(url, headers=req_headers, method=method)
        except ValueError as e:
            raise HttpFetchError(f"Invalid URL {url!r}: {e}", url) from e

        try:
            with self._opener.open(req, timeout=self.timeout) as resp:
                body = resp.read()
                return Response(
                    status_code=resp.status,
                    headers={k.lower(): v for k, v in resp.headers.items()},
                    body=body,
                    requested_uri=resp.geturl(),
                )
        except urllib.error.HTTPError as e:
            raise HttpFetchError(f"HTTP {e.code} fetching {url}", url, e.code) from e
        except urllib.error.URLError as e:
            raise HttpFetchError(f"Cannot fetch {url}: {e.reason}", url) from e
        except (socket.timeout, TimeoutError) as e:
            raise HttpFetchError(f"Timed out fetching {url}", url) from e
        except (OSError, http.client.HTTPException) as e:
            raise HttpFetchError(f"I/O error fetching {url}: {e}", url) from e
