"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the stdio transport
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import patterndocs.tools.get_entry_toc as t_get_toc
import patterndocs.tools.manage_cache as t_manage
import patterndocs.tools.read_entry as t_read_entry
from patterndocs import __version__
from patterndocs.cache import Cache
from patterndocs.catalog import EntryCatalog, load_catalog
from patterndocs.config import Settings
from patterndocs.errors import PatternDocsError
from patterndocs.filestore import LocalFileStore
from patterndocs.invalidation import InvalidationHook
from patterndocs.key_registry import CacheKeyRegistry
from patterndocs.resolver import ContentResolver
from patterndocs.service import CachedContentService
from patterndocs.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_state(settings: Settings, cache: Cache, catalog_path: Path | None = None) -> AppState:
    """Wire the engine components around an initialised cache."""
    entries = load_catalog(catalog_path) if catalog_path is not None else None
    catalog = EntryCatalog(entries or [], settings.content)

    files = LocalFileStore(Path(settings.content.root).expanduser())
    resolver = ContentResolver(catalog, files, settings.content)
    registry = CacheKeyRegistry(cache, ttl_hours=settings.cache.key_registry_ttl_hours)
    content = CachedContentService(
        resolver, cache, registry, ttl_minutes=settings.cache.ttl_minutes
    )

    invalidation = InvalidationHook(cache, registry, catalog, locales=settings.content.locales)
    catalog.subscribe(invalidation.handle)

    return AppState(
        settings=settings,
        catalog=catalog,
        content=content,
        invalidation=invalidation,
        catalog_path=catalog_path,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__)

    db_path = Path(settings.cache.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    cache = Cache(db)
    await cache.init_db()
    await cache.cleanup_if_due(settings.cache.cleanup_interval_hours)

    state = build_state(
        settings, cache, catalog_path=Path(settings.content.catalog_path).expanduser()
    )

    log.info(
        "server_started",
        version=__version__,
        catalog_entries=len(state.catalog),
        content_root=settings.content.root,
    )

    try:
        yield state
    finally:
        await db.close()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("patterndocs", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg, so set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: PatternDocsError) -> CallToolResult:
    """Convert a PatternDocsError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


async def _run_tool(tool: str, call: Awaitable[dict]) -> object:
    try:
        return await call
    except PatternDocsError as exc:
        log.warning(
            "tool_error",
            tool=tool,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool=tool, exc_info=True)
        raise


@mcp.tool()
async def read_entry(entry_id: int, locale: str, ctx: Context) -> object:
    """Read the Markdown body of a pattern entry in the given locale.

    Falls back to the primary locale when no translation exists, and to a
    "content pending" placeholder when the entry has no content yet.
    """
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("read_entry", t_read_entry.handle(entry_id, locale, state))


@mcp.tool()
async def get_entry_toc(entry_id: int, locale: str, ctx: Context) -> object:
    """Return the table of contents (level, title, anchor slug, indent) of an entry."""
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("get_entry_toc", t_get_toc.handle(entry_id, locale, state))


@mcp.tool()
async def clear_cache(ctx: Context, entry_id: int | None = None) -> object:
    """Clear cached content and TOCs for one entry, or for every entry."""
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("clear_cache", t_manage.clear_cache(entry_id, state))


@mcp.tool()
async def reload_catalog(ctx: Context) -> object:
    """Re-read entries.json and invalidate entries that changed or were removed."""
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("reload_catalog", t_manage.reload_catalog(state))


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
