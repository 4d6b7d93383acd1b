"""Integration test fixtures.

Provides a fully wired AppState over in-memory SQLite and a temporary content
root, plus an environment for subprocess-based MCP tests. Entry and file
fixtures come from tests/conftest.py (sample_entries, sample_files).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import pytest

from patterndocs.cache import Cache
from patterndocs.config import Settings
from patterndocs.server import build_state

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from patterndocs.config import ContentSettings
    from patterndocs.models.catalog import EntryRecord
    from patterndocs.state import AppState


def _write_catalog(path: Path, entries: list[EntryRecord]) -> None:
    """Write entry records to ``path`` in the entries.json format."""
    path.write_text(
        json.dumps([entry.model_dump(mode="json") for entry in entries], ensure_ascii=False),
        encoding="utf-8",
    )


@pytest.fixture()
def catalog_file(
    content_settings: ContentSettings,
    sample_entries: list[EntryRecord],
    content_root: Path,
) -> Path:
    path = Path(content_settings.catalog_path)
    _write_catalog(path, sample_entries)
    return path


@pytest.fixture()
def subprocess_env(catalog_file: Path, content_root: Path, tmp_path: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points every data path at the isolated tmp directory so a local
    patterndocs.yaml cannot leak into the run.
    """
    env = os.environ.copy()
    env["PATTERNDOCS__CONTENT__ROOT"] = str(content_root)
    env["PATTERNDOCS__CONTENT__CATALOG_PATH"] = str(catalog_file)
    env["PATTERNDOCS__CACHE__DB_PATH"] = str(tmp_path / "cache.db")
    return env


@pytest.fixture()
async def app_state(
    content_settings: ContentSettings, catalog_file: Path
) -> AsyncGenerator[AppState, None]:
    """Full AppState wired the same way the server lifespan wires it."""
    async with aiosqlite.connect(":memory:") as db:
        cache = Cache(db)
        await cache.init_db()
        settings = Settings(content=content_settings)
        yield build_state(settings, cache, catalog_path=catalog_file)
