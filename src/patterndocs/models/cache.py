from __future__ import annotations

from pydantic import BaseModel


class KeyRegistryRecord(BaseModel):
    """Cache keys currently believed live for one entry."""

    entry_id: int
    keys: list[str] = []  # Sorted, deduplicated
