"""Heading anchor slugs.

The browser-side table of contents computes the same anchors from the rendered
headings, so every step here must stay in lock-step with that script:

  1. Lowercase (``str.lower``; CJK has no case and passes through)
  2. Replace each character outside ``a-z``, ``0-9`` and U+4E00–U+9FA5 with ``-``
  3. Collapse dash runs
  4. Trim leading and trailing dashes
  5. Empty result → ``"section-"`` + first 8 hex chars of the MD5 of the input
"""

from __future__ import annotations

import hashlib
import re

_DISALLOWED_RE = re.compile(r"[^a-z0-9\u4e00-\u9fa5]")
_DASH_RUN_RE = re.compile(r"-{2,}")

FALLBACK_PREFIX = "section-"


def slugify(text: str) -> str:
    """Map heading text to a URL-safe anchor. Never empty, never raises."""
    slug = _DISALLOWED_RE.sub("-", text.lower())
    slug = _DASH_RUN_RE.sub("-", slug)
    slug = slug.strip("-")
    if slug:
        return slug
    digest = hashlib.md5(text.encode("utf-8", "surrogatepass")).hexdigest()
    return FALLBACK_PREFIX + digest[:8]
