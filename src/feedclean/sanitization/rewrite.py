"""Relative URL rewriting with HTTPS enforcement."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bs4 import Tag

from feedclean.domains import HttpsDomainTree
from feedclean.urls import absolutize_url

_LOGGER = logging.getLogger(__name__)


def replace_urls(
    root: Tag,
    tag: str,
    attributes: str | Iterable[str],
    base: str,
    domain_tree: HttpsDomainTree | None = None,
) -> int:
    """Absolutize the URL attributes of every ``tag`` element below ``root``.

    Values that cannot be resolved are left untouched. Resolved ``http://``
    URLs on forced-HTTPS domains are upgraded.

    Args:
        root: Element to search below
        tag: Element name, e.g. ``"img"``
        attributes: Attribute name or names holding URLs
        base: Base URI of the fragment
        domain_tree: Forced-HTTPS domains

    Returns:
        Number of attribute values rewritten
    """
    if isinstance(attributes, str):
        attributes = [attributes]
    attributes = list(attributes)

    rewritten = 0
    for element in root.find_all(tag):
        for attribute in attributes:
            if not element.has_attr(attribute):
                continue
            value = absolutize_url(element[attribute], base)
            if value is None:
                _LOGGER.debug("Leaving unresolvable %s/@%s: %r", tag, attribute, element[attribute])
                continue
            if domain_tree is not None:
                value = domain_tree.https_url(value)
            element[attribute] = value
            rewritten += 1
    return rewritten
