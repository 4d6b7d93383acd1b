"""Per-entry index of live cache keys.

The cache has no prefix delete, so every key the content service writes is
recorded here under its entry id. The record lives in the cache itself
(``cache_keys:{entry_id}``) with a long TTL, so registrations for entries that
are never invalidated eventually age out. Every registration restarts that TTL.

The registry is a finder aid for invalidation, never a source of truth: a key
listed here but absent from the cache is harmless, while a cached key missing
from here is a coherence bug. ``register`` is therefore called before the
corresponding ``put``.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog

from patterndocs.models.cache import KeyRegistryRecord

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from patterndocs.protocols import CacheProtocol

log = structlog.get_logger()

REGISTRY_KEY_PREFIX = "cache_keys"


def registry_key(entry_id: int) -> str:
    return f"{REGISTRY_KEY_PREFIX}:{entry_id}"


class CacheKeyRegistry:
    """Cache-backed ``entry_id → set[key]`` mapping.

    Read-modify-write of one entry's record is serialised with a per-entry
    ``asyncio.Lock``; concurrent registrations for the same entry coalesce
    instead of overwriting each other. A lock lives only while some task holds
    or waits for it.
    """

    def __init__(self, cache: CacheProtocol, ttl_hours: int = 24) -> None:
        self._cache = cache
        self._ttl_seconds = ttl_hours * 3600
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}

    @asynccontextmanager
    async def _entry_lock(self, entry_id: int) -> AsyncIterator[None]:
        lock = self._locks.get(entry_id)
        if lock is None:
            lock = self._locks[entry_id] = asyncio.Lock()
        self._lock_users[entry_id] = self._lock_users.get(entry_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[entry_id] -= 1
            if not self._lock_users[entry_id]:
                del self._lock_users[entry_id]
                del self._locks[entry_id]

    async def _load(self, entry_id: int) -> KeyRegistryRecord:
        raw = await self._cache.get(registry_key(entry_id))
        if raw is None:
            return KeyRegistryRecord(entry_id=entry_id)
        return KeyRegistryRecord.model_validate_json(raw)

    async def register(self, entry_id: int, key: str) -> None:
        """Record ``key`` for ``entry_id`` and restart the record's TTL.

        The record is rewritten even when ``key`` is already listed, so it
        always outlives the value just populated under that key.
        """
        async with self._entry_lock(entry_id):
            record = await self._load(entry_id)
            record.keys = sorted({*record.keys, key})
            await self._cache.put(
                registry_key(entry_id),
                record.model_dump_json().encode("utf-8"),
                self._ttl_seconds,
            )
        log.debug("cache_key_registered", entry_id=entry_id, key=key)

    async def keys_for(self, entry_id: int) -> frozenset[str]:
        record = await self._load(entry_id)
        return frozenset(record.keys)

    async def clear(self, entry_id: int) -> None:
        """Drop the entry's record. Does not touch the keys it listed."""
        async with self._entry_lock(entry_id):
            await self._cache.forget(registry_key(entry_id))
        log.debug("cache_keys_cleared", entry_id=entry_id)
