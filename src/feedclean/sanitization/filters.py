"""Tag and attribute filters over a parsed fragment.

Matching elements are always collected before the tree is modified, so
removing or unwrapping one element never disturbs the iteration over the
others.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from bs4 import Comment, NavigableString, Tag

_LOGGER = logging.getLogger(__name__)

# Tags whose content is code, not text: dropped together with their content
OPAQUE_TAGS = frozenset({"script", "style"})

RENAMED_ATTRIBUTE_PREFIX = "data-sanitized-"


def strip_comments(root: Tag) -> int:
    """Remove every comment node below ``root``.

    Returns:
        Number of comments removed
    """
    comments = root.find_all(string=lambda text: isinstance(text, Comment))
    for comment in comments:
        comment.extract()
    return len(comments)


def _open_tag_text(element: Tag, *, xhtml: bool) -> str:
    """Rebuild the literal open tag of ``element`` for encode mode."""
    text = f"<{element.name}"
    if element.attrs:
        attrs = []
        for name, value in element.attrs.items():
            if not value:
                if xhtml:
                    # XHTML has no minimized attributes
                    value = name
                else:
                    attrs.append(name)
                    continue
            attrs.append(f'{name}="{value}"')
        text += " " + " ".join(attrs)
    return text + ">"


def strip_tag(root: Tag, tag: str, *, encode: bool = False, xhtml: bool = False) -> int:
    """Remove or encode every ``tag`` element below ``root``.

    Strip mode drops ``script``/``style`` with their content and replaces any
    other element by its children. Encode mode turns the element into literal
    text: the open tag, the (still processed) children, then the close tag;
    ``script``/``style`` become their whole original markup as text.

    Args:
        root: Element to search below
        tag: Tag name to remove
        encode: Encode instead of strip
        xhtml: Rebuild attributes using XHTML rules in encode mode

    Returns:
        Number of elements affected
    """
    elements = root.find_all(tag)
    opaque = tag in OPAQUE_TAGS

    for element in elements:
        if encode and opaque:
            element.replace_with(NavigableString(str(element)))
        elif encode:
            element.insert_before(NavigableString(_open_tag_text(element, xhtml=xhtml)))
            element.insert_after(NavigableString(f"</{element.name}>"))
            element.unwrap()
        elif opaque:
            element.extract()
        else:
            element.unwrap()

    if elements:
        _LOGGER.debug("%s %d <%s> element(s)", "Encoded" if encode else "Stripped", len(elements), tag)
    return len(elements)


def strip_attr(root: Tag, attribute: str) -> int:
    """Remove ``attribute`` from every element below ``root`` that has it."""
    elements = root.find_all(attrs={attribute: True})
    for element in elements:
        del element[attribute]
    return len(elements)


def rename_attr(root: Tag, attribute: str) -> int:
    """Move ``attribute`` to ``data-sanitized-<attribute>`` on every element that has it.

    Example:
        ``<p style="color:red">`` becomes ``<p data-sanitized-style="color:red">``.
    """
    elements = root.find_all(attrs={attribute: True})
    for element in elements:
        element[RENAMED_ATTRIBUTE_PREFIX + attribute] = element[attribute]
        del element[attribute]
    return len(elements)


def add_attr(root: Tag, tag: str, attributes: Mapping[str, str]) -> int:
    """Force-set ``attributes`` on every ``tag`` element below ``root``."""
    elements = root.find_all(tag)
    for element in elements:
        for name, value in attributes.items():
            element[name] = value
    return len(elements)
