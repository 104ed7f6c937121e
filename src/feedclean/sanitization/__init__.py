"""HTML fragment sanitization.

Exports:
    - Sanitizer: Orchestrates one sanitize call per feed construct
    - sanitize_fragment: One-shot convenience wrapper
    - ParserUnavailableError: The configured HTML parser is not installed
    - ImageProxy: Caches remote images and rewrites their src
    - Tag/attribute filters and URL rewriting used by the Sanitizer
"""

from __future__ import annotations

from feedclean.sanitization.document import (
    ParserUnavailableError,
    fragment_root,
    load_document,
    preprocess,
    serialize_fragment,
)
from feedclean.sanitization.filters import (
    OPAQUE_TAGS,
    RENAMED_ATTRIBUTE_PREFIX,
    add_attr,
    rename_attr,
    strip_attr,
    strip_comments,
    strip_tag,
)
from feedclean.sanitization.images import (
    FORWARDED_FOR_HEADER,
    ImageProxy,
    ImageProxyStats,
    is_cacheable_status,
)
from feedclean.sanitization.rewrite import replace_urls
from feedclean.sanitization.sanitizer import (
    Sanitizer,
    decode_base64,
    escape_text,
    sanitize_fragment,
    transcode,
)

__all__ = [
    # Orchestration
    "Sanitizer",
    "sanitize_fragment",
    "decode_base64",
    "escape_text",
    "transcode",
    # Document handling
    "ParserUnavailableError",
    "preprocess",
    "load_document",
    "fragment_root",
    "serialize_fragment",
    # Filters
    "OPAQUE_TAGS",
    "RENAMED_ATTRIBUTE_PREFIX",
    "strip_comments",
    "strip_tag",
    "strip_attr",
    "rename_attr",
    "add_attr",
    "replace_urls",
    # Image proxy
    "FORWARDED_FOR_HEADER",
    "ImageProxy",
    "ImageProxyStats",
    "is_cacheable_status",
]
