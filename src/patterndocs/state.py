"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from patterndocs.catalog import EntryCatalog
    from patterndocs.config import Settings
    from patterndocs.invalidation import InvalidationHook
    from patterndocs.service import CachedContentService


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    catalog: EntryCatalog
    content: CachedContentService
    invalidation: InvalidationHook
    catalog_path: Path | None = None
