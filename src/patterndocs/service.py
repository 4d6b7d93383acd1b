"""Read-through cache over content resolution and TOC extraction.

Content and TOC are cached independently under ``content:{id}:{locale}`` and
``toc:{id}:{locale}``. On a miss the value is computed, its key registered with
``CacheKeyRegistry``, and only then written to the cache.

Concurrent misses on the same key may both compute and both write; resolution
and extraction are deterministic, so the race only wastes work. An invalidation
racing a populate can leave the populated value live until its TTL expires;
the staleness window is bounded by ``ttl_minutes``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import TypeAdapter

from patterndocs.models.toc import TocEntry
from patterndocs.parser import extract_toc

if TYPE_CHECKING:
    from patterndocs.key_registry import CacheKeyRegistry
    from patterndocs.protocols import CacheProtocol
    from patterndocs.resolver import ContentResolver

log = structlog.get_logger()

_TOC_ADAPTER = TypeAdapter(list[TocEntry])


def content_key(entry_id: int, locale: str) -> str:
    return f"content:{entry_id}:{locale}"


def toc_key(entry_id: int, locale: str) -> str:
    return f"toc:{entry_id}:{locale}"


class CachedContentService:
    def __init__(
        self,
        resolver: ContentResolver,
        cache: CacheProtocol,
        registry: CacheKeyRegistry,
        ttl_minutes: int = 30,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._registry = registry
        self._ttl_seconds = ttl_minutes * 60

    async def get_content(self, entry_id: int, locale: str) -> str:
        key = content_key(entry_id, locale)
        cached = await self._cache.get(key)
        if cached is not None:
            log.debug("cache_hit", key=key, entry_id=entry_id, locale=locale)
            return cached.decode("utf-8")

        log.info("cache_miss", key=key, entry_id=entry_id, locale=locale)
        content = self._resolver.resolve(entry_id, locale)
        await self._populate(entry_id, key, content.encode("utf-8"))
        return content

    async def get_toc(self, entry_id: int, locale: str) -> list[TocEntry]:
        key = toc_key(entry_id, locale)
        cached = await self._cache.get(key)
        if cached is not None:
            log.debug("cache_hit", key=key, entry_id=entry_id, locale=locale)
            return _TOC_ADAPTER.validate_json(cached)

        log.info("cache_miss", key=key, entry_id=entry_id, locale=locale)
        # Resolved directly: the TOC never depends on the content key being warm
        toc = extract_toc(self._resolver.resolve(entry_id, locale))
        await self._populate(entry_id, key, _TOC_ADAPTER.dump_json(toc))
        return toc

    async def _populate(self, entry_id: int, key: str, value: bytes) -> None:
        # Registration must land before the value is visible to other readers
        await self._registry.register(entry_id, key)
        await self._cache.put(key, value, self._ttl_seconds)
