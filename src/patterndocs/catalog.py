"""Entry catalog: loading, metadata lookups, and lifecycle notifications."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

from patterndocs.models.catalog import EntryChange, EntryRecord

if TYPE_CHECKING:
    from pathlib import Path

    from patterndocs.config import ContentSettings
    from patterndocs.protocols import EntryListener

log = structlog.get_logger()


def default_file_path(slug: str, locale: str) -> str:
    """Path given to a newly saved content file, relative to the content root."""
    return f"{slug}_{locale}.md"


def load_catalog(path: Path) -> list[EntryRecord] | None:
    """Load entry records from a JSON array on disk.

    Returns None (and logs why) when the file is missing or invalid.
    """
    if not path.is_file():
        log.warning("catalog_missing", path=str(path))
        return None

    try:
        raw_entries = json.loads(path.read_bytes().decode("utf-8"))
        entries = [EntryRecord(**entry) for entry in raw_entries]
    except Exception:
        log.warning("catalog_invalid", path=str(path), exc_info=True)
        return None

    log.info("catalog_loaded", entries=len(entries), path=str(path))
    return entries


class EntryCatalog:
    """In-memory entry metadata implementing MetadataProtocol.

    Mutations (``upsert``, ``delete``, ``replace_all``) await every subscribed
    listener with an ``EntryChange`` before returning.
    """

    def __init__(self, entries: list[EntryRecord], settings: ContentSettings) -> None:
        self._settings = settings
        self._by_id: dict[int, EntryRecord] = {entry.id: entry for entry in entries}
        self._listeners: list[EntryListener] = []

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, entry_id: int) -> EntryRecord | None:
        return self._by_id.get(entry_id)

    def ids(self) -> list[int]:
        return sorted(self._by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def entry_locales(self, entry_id: int) -> frozenset[str]:
        entry = self._by_id.get(entry_id)
        if entry is None:
            return frozenset()
        return entry.locales()

    def file_path(self, entry_id: int, locale: str) -> str | None:
        entry = self._by_id.get(entry_id)
        if entry is None:
            return None
        return entry.file_paths.get(locale) or None

    def display_name(self, entry_id: int, locale: str) -> str:
        """Name in the requested locale, then the primary locale, then "untitled"."""
        entry = self._by_id.get(entry_id)
        if entry is not None:
            for candidate in (locale, self._settings.primary_locale):
                name = entry.names.get(candidate)
                if name:
                    return name
        return self._settings.untitled_name(locale)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def subscribe(self, listener: EntryListener) -> None:
        self._listeners.append(listener)

    async def upsert(self, entry: EntryRecord) -> None:
        previous = self._by_id.get(entry.id)
        self._by_id[entry.id] = entry
        locales = entry.locales() | (previous.locales() if previous else frozenset())
        await self._notify(EntryChange(entry_id=entry.id, kind="updated", locales=locales))

    async def delete(self, entry_id: int) -> bool:
        previous = self._by_id.pop(entry_id, None)
        if previous is None:
            return False
        await self._notify(
            EntryChange(entry_id=entry_id, kind="deleted", locales=previous.locales())
        )
        return True

    async def replace_all(self, entries: list[EntryRecord]) -> list[EntryChange]:
        """Swap in a freshly loaded entry set, notifying for every difference."""
        incoming = {entry.id: entry for entry in entries}
        changes: list[EntryChange] = []

        for entry_id, previous in self._by_id.items():
            current = incoming.get(entry_id)
            if current is None:
                changes.append(
                    EntryChange(entry_id=entry_id, kind="deleted", locales=previous.locales())
                )
            elif current != previous:
                changes.append(
                    EntryChange(
                        entry_id=entry_id,
                        kind="updated",
                        locales=current.locales() | previous.locales(),
                    )
                )

        # New ids may still have placeholder renders cached from before they existed
        for entry_id, current in incoming.items():
            if entry_id not in self._by_id:
                changes.append(
                    EntryChange(entry_id=entry_id, kind="updated", locales=current.locales())
                )

        self._by_id = incoming
        for change in changes:
            await self._notify(change)

        log.info("catalog_replaced", entries=len(incoming), changed=len(changes))
        return changes

    async def _notify(self, change: EntryChange) -> None:
        log.debug("entry_changed", entry_id=change.entry_id, kind=change.kind)
        for listener in self._listeners:
            await listener(change)
