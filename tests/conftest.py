"""Shared test fixtures for the patterndocs test suite."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import aiosqlite
import pytest

from patterndocs.cache import Cache
from patterndocs.catalog import EntryCatalog
from patterndocs.config import ContentSettings
from patterndocs.filestore import LocalFileStore
from patterndocs.invalidation import InvalidationHook
from patterndocs.key_registry import CacheKeyRegistry
from patterndocs.models.catalog import EntryRecord
from patterndocs.resolver import ContentResolver
from patterndocs.service import CachedContentService

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@pytest.fixture()
def content_settings(tmp_path: Path) -> ContentSettings:
    return ContentSettings(
        root=str(tmp_path / "content"),
        catalog_path=str(tmp_path / "entries.json"),
    )


@pytest.fixture()
def sample_entries() -> list[EntryRecord]:
    """Entries covering every fallback case.

    1: both locales on disk. 2: primary locale only. 3: no files at all.
    4: paths on record but files missing on disk.
    """
    return [
        EntryRecord(
            id=1,
            slug="singleton",
            category="creational",
            names={"zh": "单例模式", "en": "Singleton"},
            file_paths={"zh": "singleton_zh.md", "en": "singleton_en.md"},
        ),
        EntryRecord(
            id=2,
            slug="observer",
            category="behavioral",
            names={"zh": "观察者模式", "en": "Observer"},
            file_paths={"zh": "observer_zh.md"},
        ),
        EntryRecord(
            id=3,
            slug="builder",
            category="creational",
            names={"zh": "建造者模式"},
        ),
        EntryRecord(
            id=4,
            slug="adapter",
            category="structural",
            names={"zh": "适配器模式", "en": "Adapter"},
            file_paths={"zh": "adapter_zh.md", "en": "adapter_en.md"},
        ),
    ]


@pytest.fixture()
def sample_files() -> dict[str, str]:
    """Content files written under the content root, keyed by recorded path."""
    return {
        "singleton_zh.md": "# 单例模式\n\n## 意图\n\n确保一个类只有一个实例。\n\n## 结构\n",
        "singleton_en.md": (
            "# Singleton\n\n"
            "## Intent\n\n"
            "Ensure a class has only one instance.\n\n"
            "## **Structure**\n\n"
            "```python\ninstance = None\n```\n\n"
            "### Thread-safe `get_instance()`\n"
        ),
        "observer_zh.md": "# 观察者模式\n\n## 意图\n",
    }


@pytest.fixture()
def content_root(content_settings: ContentSettings, sample_files: dict[str, str]) -> Path:
    root = Path(content_settings.root)
    root.mkdir(parents=True, exist_ok=True)
    for name, text in sample_files.items():
        (root / name).write_text(text, encoding="utf-8")
    return root


@pytest.fixture()
def catalog(sample_entries: list[EntryRecord], content_settings: ContentSettings) -> EntryCatalog:
    return EntryCatalog(sample_entries, content_settings)


@pytest.fixture()
def resolver(
    catalog: EntryCatalog, content_root: Path, content_settings: ContentSettings
) -> ContentResolver:
    return ContentResolver(catalog, LocalFileStore(content_root), content_settings)


@pytest.fixture()
def resolve_spy(resolver: ContentResolver, monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Counts ContentResolver.resolve calls while keeping its behaviour."""
    spy = MagicMock(wraps=resolver.resolve)
    monkeypatch.setattr(resolver, "resolve", spy)
    return spy


@pytest.fixture()
async def cache() -> AsyncGenerator[Cache, None]:
    async with aiosqlite.connect(":memory:") as db:
        cache = Cache(db)
        await cache.init_db()
        yield cache


@pytest.fixture()
def registry(cache: Cache) -> CacheKeyRegistry:
    return CacheKeyRegistry(cache, ttl_hours=24)


@pytest.fixture()
def service(
    resolver: ContentResolver, cache: Cache, registry: CacheKeyRegistry
) -> CachedContentService:
    return CachedContentService(resolver, cache, registry, ttl_minutes=30)


@pytest.fixture()
def hook(
    cache: Cache,
    registry: CacheKeyRegistry,
    catalog: EntryCatalog,
    content_settings: ContentSettings,
) -> InvalidationHook:
    hook = InvalidationHook(cache, registry, catalog, locales=content_settings.locales)
    catalog.subscribe(hook.handle)
    return hook
