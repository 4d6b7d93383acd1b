"""SQLite key/value cache with per-key expiry.

Only single-key ``get`` / ``put`` / ``forget`` are offered; there is no prefix
delete, which is why ``CacheKeyRegistry`` exists.

Backend failures on ``get`` / ``put`` / ``forget`` are logged and raised as
``PatternDocsError(CACHE_UNAVAILABLE)``. Callers must not fall back to an
uncached computation: a value served without its key registered could never
be invalidated. Maintenance (expired-row cleanup) is the exception and is
non-fatal.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

from patterndocs.errors import ErrorCode, PatternDocsError

log = structlog.get_logger()

_CREATE_ENTRIES_TABLE = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key        TEXT PRIMARY KEY,
    value      BLOB NOT NULL,
    expires_at TEXT NOT NULL
)
"""

_CREATE_ENTRIES_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_entries_expires ON cache_entries(expires_at)"
)

_CREATE_METADATA_TABLE = """
CREATE TABLE IF NOT EXISTS server_metadata (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


def _unavailable(operation: str, key: str) -> PatternDocsError:
    return PatternDocsError(
        code=ErrorCode.CACHE_UNAVAILABLE,
        message=f"Cache {operation} failed for key {key!r}.",
        suggestion="The cache backend is unavailable. Retry the request later.",
        recoverable=True,
    )


class Cache:
    """SQLite-backed cache implementing CacheProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_ENTRIES_TABLE)
        await self._db.execute(_CREATE_ENTRIES_INDEX)
        await self._db.execute(_CREATE_METADATA_TABLE)
        await self._db.commit()

    # ------------------------------------------------------------------
    # Key/value operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        """Read a value. Returns ``None`` on miss or when the row has expired."""
        try:
            cursor = await self._db.execute(
                "SELECT value, expires_at FROM cache_entries WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            log.warning("cache_read_error", key=key, exc_info=True)
            raise _unavailable("read", key) from exc

        if row is None:
            return None
        if datetime.now(UTC) >= datetime.fromisoformat(row[1]):
            return None
        return bytes(row[0])

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Write a value that expires ``ttl_seconds`` from now."""
        expires_at = datetime.now(UTC) + timedelta(seconds=ttl_seconds)
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (key, value, expires_at.isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.warning("cache_write_error", key=key, exc_info=True)
            raise _unavailable("write", key) from exc

    async def forget(self, key: str) -> None:
        """Delete a value. Forgetting an absent key is a no-op."""
        try:
            await self._db.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.warning("cache_delete_error", key=key, exc_info=True)
            raise _unavailable("delete", key) from exc

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def cleanup_if_due(self, interval_hours: int) -> None:
        """Run cleanup only if interval_hours have elapsed since the last run.

        Reads and writes ``last_cleanup_at`` from the ``server_metadata`` table.
        Falls through to run cleanup if the metadata row is missing or unreadable.
        Non-fatal on failure.
        """
        try:
            cursor = await self._db.execute(
                "SELECT value FROM server_metadata WHERE key = 'last_cleanup_at'"
            )
            row = await cursor.fetchone()
            if row is not None:
                last_run = datetime.fromisoformat(row[0])
                if datetime.now(UTC) - last_run < timedelta(hours=interval_hours):
                    log.debug("cache_cleanup_skipped", reason="not_due")
                    return
        except aiosqlite.Error:
            log.warning("cache_metadata_read_error", exc_info=True)

        await self.cleanup_expired()

        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO server_metadata (key, value) VALUES ('last_cleanup_at', ?)",
                (datetime.now(UTC).isoformat(),),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_metadata_write_error", exc_info=True)

    async def cleanup_expired(self) -> None:
        """Delete expired entries. Non-fatal on failure."""
        try:
            cursor = await self._db.execute(
                "DELETE FROM cache_entries WHERE expires_at <= ?",
                (datetime.now(UTC).isoformat(),),
            )
            deleted = cursor.rowcount
            await self._db.commit()
            log.info("cache_cleanup_complete", deleted=deleted)
        except aiosqlite.Error:
            log.warning("cache_cleanup_error", exc_info=True)
