"""Integration tests for MCP tool handlers.

Tests the full path through each handler: input validation, cached content
service, resolver and file store, then output serialisation. Uses a real
AppState over in-memory SQLite and a temporary content root.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from patterndocs.errors import ErrorCode, PatternDocsError
from patterndocs.models.catalog import EntryRecord
from patterndocs.tools import manage_cache
from patterndocs.tools.get_entry_toc import handle as get_toc_handle
from patterndocs.tools.read_entry import handle as read_handle

if TYPE_CHECKING:
    from pathlib import Path

    from patterndocs.state import AppState


class TestReadEntryHandler:
    """Full handler pipeline tests for read_entry."""

    async def test_requested_locale_served(
        self, app_state: AppState, sample_files: dict[str, str]
    ) -> None:
        result = await read_handle(1, "en", app_state)
        assert result == {
            "entry_id": 1,
            "slug": "singleton",
            "locale": "en",
            "name": "Singleton",
            "content": sample_files["singleton_en.md"],
        }

    async def test_missing_translation_falls_back_to_primary(
        self, app_state: AppState, sample_files: dict[str, str]
    ) -> None:
        result = await read_handle(2, "en", app_state)
        assert result["name"] == "Observer"
        assert result["content"] == sample_files["observer_zh.md"]

    async def test_no_content_returns_placeholder(self, app_state: AppState) -> None:
        result = await read_handle(3, "zh", app_state)
        assert result["content"] == "# 建造者模式\n\n内容正在编写中..."

    async def test_recorded_but_missing_file_returns_placeholder(
        self, app_state: AppState
    ) -> None:
        result = await read_handle(4, "en", app_state)
        assert result["content"] == "# Adapter\n\nContent is being written..."

    async def test_unknown_entry_raises_not_found(self, app_state: AppState) -> None:
        with pytest.raises(PatternDocsError) as exc_info:
            await read_handle(999, "zh", app_state)
        assert exc_info.value.code == ErrorCode.ENTRY_NOT_FOUND
        assert exc_info.value.recoverable is False

    async def test_unsupported_locale_raises_invalid_input(self, app_state: AppState) -> None:
        with pytest.raises(PatternDocsError) as exc_info:
            await read_handle(1, "fr", app_state)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT

    async def test_non_positive_id_raises_invalid_input(self, app_state: AppState) -> None:
        with pytest.raises(PatternDocsError) as exc_info:
            await read_handle(0, "zh", app_state)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT


class TestGetEntryTocHandler:
    """Full handler pipeline tests for get_entry_toc."""

    async def test_toc_for_primary_locale(self, app_state: AppState) -> None:
        result = await get_toc_handle(1, "zh", app_state)
        assert result == {
            "entry_id": 1,
            "locale": "zh",
            "toc": [
                {"level": 1, "title": "单例模式", "slug": "单例模式", "indent": 0},
                {"level": 2, "title": "意图", "slug": "意图", "indent": 0},
                {"level": 2, "title": "结构", "slug": "结构", "indent": 0},
            ],
        }

    async def test_placeholder_toc_is_its_title(self, app_state: AppState) -> None:
        result = await get_toc_handle(3, "en", app_state)
        assert [item["title"] for item in result["toc"]] == ["建造者模式"]

    async def test_unknown_entry_raises_not_found(self, app_state: AppState) -> None:
        with pytest.raises(PatternDocsError) as exc_info:
            await get_toc_handle(999, "en", app_state)
        assert exc_info.value.code == ErrorCode.ENTRY_NOT_FOUND


class TestClearCacheHandler:
    async def test_clear_single_entry_serves_fresh_content(
        self, app_state: AppState, content_root: Path
    ) -> None:
        await read_handle(2, "zh", app_state)
        (content_root / "observer_zh.md").write_text("# 新版本\n", encoding="utf-8")

        # Still the cached copy until the entry is cleared
        assert (await read_handle(2, "zh", app_state))["content"] == "# 观察者模式\n\n## 意图\n"

        assert await manage_cache.clear_cache(2, app_state) == {"cleared_entries": 1}
        assert (await read_handle(2, "zh", app_state))["content"] == "# 新版本\n"

    async def test_clear_all(self, app_state: AppState, content_root: Path) -> None:
        await get_toc_handle(1, "en", app_state)
        (content_root / "singleton_en.md").write_text("# Replaced\n", encoding="utf-8")

        assert await manage_cache.clear_cache(None, app_state) == {"cleared_entries": 4}

        result = await get_toc_handle(1, "en", app_state)
        assert [item["title"] for item in result["toc"]] == ["Replaced"]

    async def test_clear_unknown_entry_raises(self, app_state: AppState) -> None:
        with pytest.raises(PatternDocsError) as exc_info:
            await manage_cache.clear_cache(999, app_state)
        assert exc_info.value.code == ErrorCode.ENTRY_NOT_FOUND


class TestReloadCatalogHandler:
    async def test_reload_applies_changes_and_invalidates(
        self,
        app_state: AppState,
        catalog_file: Path,
        sample_entries: list[EntryRecord],
    ) -> None:
        before = await read_handle(3, "en", app_state)
        assert before["content"].startswith("# 建造者模式")

        builder = sample_entries[2].model_copy(
            update={"names": {"zh": "建造者模式", "en": "Builder"}}
        )
        visitor = EntryRecord(id=9, slug="visitor", names={"en": "Visitor"})
        entries = [sample_entries[0], sample_entries[1], builder, visitor]
        catalog_file.write_text(
            json.dumps([e.model_dump(mode="json") for e in entries], ensure_ascii=False),
            encoding="utf-8",
        )

        result = await manage_cache.reload_catalog(app_state)

        assert result == {"entries": 4, "updated": [3, 9], "deleted": [4]}
        after = await read_handle(3, "en", app_state)
        assert after["content"] == "# Builder\n\nContent is being written..."

    async def test_deleted_entry_is_no_longer_readable(
        self,
        app_state: AppState,
        catalog_file: Path,
        sample_entries: list[EntryRecord],
    ) -> None:
        catalog_file.write_text(
            json.dumps([sample_entries[0].model_dump(mode="json")], ensure_ascii=False),
            encoding="utf-8",
        )
        await manage_cache.reload_catalog(app_state)

        with pytest.raises(PatternDocsError) as exc_info:
            await read_handle(2, "zh", app_state)
        assert exc_info.value.code == ErrorCode.ENTRY_NOT_FOUND

    async def test_invalid_catalog_keeps_current_entries(
        self, app_state: AppState, catalog_file: Path
    ) -> None:
        catalog_file.write_text("[{broken", encoding="utf-8")

        with pytest.raises(PatternDocsError) as exc_info:
            await manage_cache.reload_catalog(app_state)

        assert exc_info.value.code == ErrorCode.CATALOG_UNAVAILABLE
        assert exc_info.value.recoverable is True
        assert app_state.catalog.ids() == [1, 2, 3, 4]
