"""Forced-HTTPS domain matching.

Domains are kept in a suffix tree keyed by DNS label, top-level label first.
A node is either a dict of child labels or ``True``, which marks the suffix
(and every subdomain of it) as HTTPS-only. A terminal node is never descended
past, so a broader rule such as ``example.com`` supersedes narrower ones like
``www.example.com`` regardless of the order they were added in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Union
from urllib.parse import urlsplit

_LOGGER = logging.getLogger(__name__)

# Whitespace, NUL, vertical tab and dot are trimmed from configured domains
_DOMAIN_TRIM = ". \t\n\r\0\x0b"
_HOST_TRIM = ". "

_Node = Union[dict[str, "_Node"], bool]


def _labels(domain: str, trim: str) -> list[str]:
    """Split a domain into lower-cased labels, top-level label first."""
    domain = domain.strip(trim).lower()
    return list(reversed(domain.split(".")))


class HttpsDomainTree:
    """Suffix tree of domains whose ``http://`` URLs are upgraded to HTTPS.

    Example:
        >>> tree = HttpsDomainTree(["example.com"])
        >>> tree.is_forced_https("img.example.com")
        True
        >>> tree.is_forced_https("example.org")
        False
    """

    def __init__(self, domains: Iterable[str] = ()) -> None:
        self._root: dict[str, _Node] = {}
        self.set_domains(domains)

    def __bool__(self) -> bool:
        return bool(self._root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.domains()!r})"

    def set_domains(self, domains: Iterable[str]) -> None:
        """Replace the tree with the given domain list."""
        self._root = {}
        for domain in domains:
            if not domain.strip(_DOMAIN_TRIM):
                _LOGGER.debug("Ignoring empty HTTPS domain entry: %r", domain)
                continue

            labels = _labels(domain, _DOMAIN_TRIM)
            node = self._root
            for depth, label in enumerate(labels, start=1):
                child = node.get(label)
                if child is True:
                    break
                if depth == len(labels):
                    node[label] = True
                    break
                if child is None:
                    child = node[label] = {}
                node = child

    def is_forced_https(self, hostname: str | None) -> bool:
        """Return True if ``hostname`` is a configured domain or a subdomain of one."""
        if not hostname or not self._root:
            return False

        node: _Node = self._root
        for label in _labels(hostname, _HOST_TRIM):
            if node is True or label not in node:
                break
            node = node[label]
        return node is True

    def domains(self) -> list[str]:
        """Return the effective domain rules, sorted."""
        found: list[str] = []

        def walk(node: _Node, path: list[str]) -> None:
            if node is True:
                found.append(".".join(reversed(path)))
                return
            for label, child in node.items():
                walk(child, [*path, label])

        walk(self._root, [])
        return sorted(found)

    def https_url(self, url: str) -> str:
        """Upgrade ``url`` to HTTPS when its host is a forced domain.

        Only a literal ``http://`` prefix (any case) is upgraded; every other
        URL, including ones already on HTTPS, is returned unchanged.

        Example:
            >>> HttpsDomainTree(["example.com"]).https_url("http://example.com/a")
            'https://example.com/a'
        """
        if url[:7].lower() != "http://":
            return url
        try:
            hostname = urlsplit(url).hostname
        except ValueError:
            return url
        if self.is_forced_https(hostname):
            return url[:4] + "s" + url[4:]
        return url
