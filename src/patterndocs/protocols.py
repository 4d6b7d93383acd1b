"""Protocol interfaces for swappable components.

The engine references these protocols, not the concrete implementations.
This allows:
- Tests to use lightweight in-memory or instrumented implementations
- Other backends (e.g. a shared network cache, a database-backed catalog) to
  be swapped in without changing the engine
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from patterndocs.models.catalog import EntryChange

EntryListener = Callable[["EntryChange"], Awaitable[None]]


class CacheProtocol(Protocol):
    """Single-key cache backend. No prefix or pattern delete is available."""

    async def get(self, key: str) -> bytes | None: ...

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None: ...

    async def forget(self, key: str) -> None: ...


class MetadataProtocol(Protocol):
    """Read side of the entry catalog."""

    def entry_locales(self, entry_id: int) -> frozenset[str]: ...

    def file_path(self, entry_id: int, locale: str) -> str | None: ...

    def display_name(self, entry_id: int, locale: str) -> str: ...


class FileStoreProtocol(Protocol):
    """Read-only access to content files, addressed by their recorded path."""

    def exists(self, path: str) -> bool: ...

    def read_bytes(self, path: str) -> bytes: ...
