"""Cache invalidation on entry update or delete.

Two overlapping passes run on every notification:
  1. Forget ``content:`` and ``toc:`` keys for every locale the entry can be
     requested in; this covers entries whose keys were never registered.
  2. Forget every key the registry lists for the entry, then clear the record;
     this covers keys that cannot be derived from the locale alone.

Both passes only ever forget, so repeated or duplicate notifications are safe.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from patterndocs.service import content_key, toc_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from patterndocs.key_registry import CacheKeyRegistry
    from patterndocs.models.catalog import EntryChange
    from patterndocs.protocols import CacheProtocol, MetadataProtocol

log = structlog.get_logger()


class InvalidationHook:
    def __init__(
        self,
        cache: CacheProtocol,
        registry: CacheKeyRegistry,
        metadata: MetadataProtocol,
        locales: Iterable[str] = (),
    ) -> None:
        self._cache = cache
        self._registry = registry
        self._metadata = metadata
        self._locales = frozenset(locales)

    async def handle(self, change: EntryChange) -> None:
        """Catalog listener: invalidate everything cached for the changed entry."""
        await self.invalidate(change.entry_id, change.locales)
        log.info("entry_cache_invalidated", entry_id=change.entry_id, kind=change.kind)

    async def invalidate(self, entry_id: int, locales: Iterable[str] = ()) -> int:
        """Forget all cached values for one entry. Returns the number of keys forgotten."""
        candidates = (
            frozenset(locales) | self._metadata.entry_locales(entry_id) | self._locales
        )

        keys: set[str] = set()
        for locale in candidates:
            keys.add(content_key(entry_id, locale))
            keys.add(toc_key(entry_id, locale))
        keys |= await self._registry.keys_for(entry_id)

        for key in sorted(keys):
            await self._cache.forget(key)
        await self._registry.clear(entry_id)

        log.debug("entry_keys_forgotten", entry_id=entry_id, keys=len(keys))
        return len(keys)

    async def invalidate_all(self, entry_ids: Iterable[int]) -> int:
        """Invalidate every given entry. Returns the number of entries processed."""
        count = 0
        for entry_id in entry_ids:
            await self.invalidate(entry_id)
            count += 1
        log.info("all_entry_caches_invalidated", entries=count)
        return count
