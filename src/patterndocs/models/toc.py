from __future__ import annotations

from pydantic import BaseModel, Field


class TocEntry(BaseModel):
    """One heading in a table of contents."""

    level: int = Field(ge=1, le=6)
    title: str  # Emphasis and code markers removed
    slug: str  # Anchor id, identical to the one the browser computes
    indent: int = Field(ge=0)  # max(0, level - 2)
