from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, field_validator


class EntryRecord(BaseModel):
    """Single pattern entry in entries.json."""

    id: int
    slug: str
    category: str | None = None
    # locale → display name  e.g. {"zh": "单例模式", "en": "Singleton"}
    names: dict[str, str] = {}
    # locale → content file path, relative to the content root
    file_paths: dict[str, str] = {}
    is_published: bool = True
    sort_order: int = 0

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not re.match(r"^[a-z0-9][a-z0-9_-]*$", v):
            raise ValueError(f"Invalid entry slug: {v!r}")
        return v

    def locales(self) -> frozenset[str]:
        """Locales this entry has a name or a content file for."""
        named = {locale for locale, name in self.names.items() if name}
        filed = {locale for locale, path in self.file_paths.items() if path}
        return frozenset(named | filed)


@dataclass(frozen=True)
class EntryChange:
    """Lifecycle notification published by the catalog on update or delete.

    ``locales`` is taken from the record snapshot(s) at mutation time, so a
    deleted entry still reports the locales it used to have.
    """

    entry_id: int
    kind: Literal["updated", "deleted"]
    locales: frozenset[str] = frozenset()
