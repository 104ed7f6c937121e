"""Image cache proxy.

Remote images are fetched once, stored in a data cache, and their ``src``
rewritten to a local image handler URL so readers never hit the remote host.
Failures are per image: a failed fetch or cache write leaves that image as it
was and processing continues with the next one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import Tag

from feedclean.cache import CacheWriteError, DataCache, NameFilter
from feedclean.httpclient import METHOD_GET, HttpClient, HttpFetchError

_LOGGER = logging.getLogger(__name__)

_HTTP_URI_RE = re.compile(r"^https?://", re.IGNORECASE)

FORWARDED_FOR_HEADER = "X-Forwarded-For"


def is_cacheable_status(status_code: int) -> bool:
    """True for 200 and for the 2xx codes above 206."""
    return status_code == 200 or 206 < status_code < 300


@dataclass
class ImageProxyStats:
    """Counters for one proxying pass.

    Attributes:
        cached: Images rewritten from an existing cache entry
        fetched: Images fetched and stored
        failed: Images left untouched after a fetch or store failure
    """

    cached: int = 0
    fetched: int = 0
    failed: int = 0


class ImageProxy:
    """Rewrites ``<img src>`` to ``<image_handler><cache key>``.

    Args:
        image_handler: URL prefix of the image handler endpoint
        http_client: Client used to fetch images not yet cached
        cache: Data cache holding ``{"headers", "body"}`` entries
        name_filter: Turns an image URL into a cache key
        cache_duration: TTL of new cache entries in seconds
        cache_location: Shown in the warning when a cache write fails
    """

    def __init__(
        self,
        image_handler: str,
        http_client: HttpClient,
        cache: DataCache,
        name_filter: NameFilter,
        cache_duration: int = 3600,
        cache_location: str = "",
    ) -> None:
        self.image_handler = image_handler
        self.http_client = http_client
        self.cache = cache
        self.name_filter = name_filter
        self.cache_duration = cache_duration
        self.cache_location = cache_location

    def proxy_images(self, root: Tag, remote_addr: str | None = None) -> ImageProxyStats:
        """Cache and rewrite every ``img`` with a ``src`` below ``root``, in document order.

        Args:
            root: Element to search below
            remote_addr: Address of the client the page is served to, forwarded
                to the image host

        Returns:
            Counters for the pass
        """
        stats = ImageProxyStats()
        headers = {FORWARDED_FOR_HEADER: remote_addr} if remote_addr else {}

        for img in root.find_all("img", src=True):
            src = img["src"]
            key = self.name_filter.filter(src)

            if self.cache.get_data(key):
                _LOGGER.debug("Image cache hit for %s", src)
                img["src"] = self.image_handler + key
                stats.cached += 1
                continue

            try:
                response = self.http_client.request(METHOD_GET, src, headers)
            except HttpFetchError as e:
                _LOGGER.debug("Not proxying %s: %s", src, e)
                stats.failed += 1
                continue

            if not (_HTTP_URI_RE.match(response.requested_uri) and is_cacheable_status(response.status_code)):
                _LOGGER.debug("Not caching %s (status %s, uri %s)", src, response.status_code, response.requested_uri)
                stats.failed += 1
                continue

            if self._store(key, response.headers, response.body):
                img["src"] = self.image_handler + key
                stats.fetched += 1
            else:
                _LOGGER.warning(
                    "%s is not writable. Make sure you've set the correct relative or absolute path, "
                    "and that the location is server-writable.",
                    self.cache_location or "The image cache",
                )
                stats.failed += 1

        return stats

    def _store(self, key: str, headers: dict[str, str], body: bytes) -> bool:
        try:
            return bool(self.cache.set_data(key, {"headers": headers, "body": body}, self.cache_duration))
        except CacheWriteError as e:
            _LOGGER.debug("Cache write failed for %s: %s", key, e)
            return False
