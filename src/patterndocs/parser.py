"""Table-of-contents extraction for pattern entries.

Single-pass algorithm over ATX headings (H1–H6). Every line matching the
heading pattern counts, code blocks included. Each kept heading becomes a
``TocEntry`` whose slug matches the anchor the browser derives from the
rendered heading.
"""

from __future__ import annotations

import re

from patterndocs.models.toc import TocEntry
from patterndocs.slugs import slugify

_HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+)$")
_SEPARATOR_RE = re.compile(r"^[-=*_]{3,}$")
_EMPHASIS_RE = re.compile(r"[*_`]")


def clean_title(raw: str) -> str | None:
    """Return the display title for a raw heading, or None to skip it."""
    title = raw.strip()
    if not title or _SEPARATOR_RE.match(title):
        return None
    title = _EMPHASIS_RE.sub("", title).strip()
    return title or None


def extract_toc(content: str) -> list[TocEntry]:
    """Extract an ordered table of contents from Markdown content.

    Stateless: the same content always yields the same entries. Headings whose
    slugs collide get ``-2``, ``-3``… in document order.
    """
    entries: list[TocEntry] = []
    taken: set[str] = set()

    for line in content.split("\n"):
        # Lines break at "\n" only; a CRLF file leaves a trailing "\r"
        line = line.removesuffix("\r")

        match = _HEADING_RE.match(line)
        if not match:
            continue

        title = clean_title(match.group(2))
        if title is None:
            continue

        level = len(match.group(1))
        slug = _unique_slug(slugify(title), taken)
        entries.append(
            TocEntry(level=level, title=title, slug=slug, indent=max(0, level - 2))
        )

    return entries


def _unique_slug(slug: str, taken: set[str]) -> str:
    candidate = slug
    suffix = 2
    while candidate in taken:
        candidate = f"{slug}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate
