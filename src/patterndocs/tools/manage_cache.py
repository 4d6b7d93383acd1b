"""Tool handlers for operator cache maintenance: clear_cache and reload_catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from patterndocs.catalog import load_catalog
from patterndocs.errors import ErrorCode, PatternDocsError

if TYPE_CHECKING:
    from patterndocs.state import AppState


async def clear_cache(entry_id: int | None, state: AppState) -> dict:
    """Invalidate one entry, or every catalog entry when ``entry_id`` is None."""
    log = structlog.get_logger().bind(tool="clear_cache", entry_id=entry_id)
    log.info("handler_called")

    if entry_id is None:
        cleared = await state.invalidation.invalidate_all(state.catalog.ids())
        return {"cleared_entries": cleared}

    if state.catalog.get(entry_id) is None:
        raise PatternDocsError(
            code=ErrorCode.ENTRY_NOT_FOUND,
            message=f"Entry {entry_id} not found in catalog.",
            suggestion="Omit entry_id to clear every entry.",
            recoverable=False,
        )
    await state.invalidation.invalidate(entry_id)
    return {"cleared_entries": 1}


async def reload_catalog(state: AppState) -> dict:
    """Re-read entries.json and invalidate entries that changed or disappeared."""
    log = structlog.get_logger().bind(tool="reload_catalog")
    log.info("handler_called")

    if state.catalog_path is None:
        raise RuntimeError("Catalog path not configured")

    entries = load_catalog(state.catalog_path)
    if entries is None:
        raise PatternDocsError(
            code=ErrorCode.CATALOG_UNAVAILABLE,
            message=f"Catalog file missing or invalid: {state.catalog_path}",
            suggestion="Fix entries.json and reload again. The current catalog was kept.",
            recoverable=True,
        )

    changes = await state.catalog.replace_all(entries)
    return {
        "entries": len(state.catalog),
        "updated": sorted(c.entry_id for c in changes if c.kind == "updated"),
        "deleted": sorted(c.entry_id for c in changes if c.kind == "deleted"),
    }
