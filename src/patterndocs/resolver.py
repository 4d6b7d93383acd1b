"""Locale-aware content resolution.

Pure business logic over the metadata and file store collaborators, with no cache
or MCP. Missing content is a normal outcome and resolves to a placeholder.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from patterndocs.config import ContentSettings
    from patterndocs.protocols import FileStoreProtocol, MetadataProtocol

log = structlog.get_logger()


class ContentResolver:
    """Returns the Markdown body for an (entry, locale) pair. Never raises."""

    def __init__(
        self,
        metadata: MetadataProtocol,
        files: FileStoreProtocol,
        settings: ContentSettings,
    ) -> None:
        self._metadata = metadata
        self._files = files
        self._settings = settings

    def fallback_chain(self, locale: str) -> list[str]:
        """Locales to try, in order: the requested one, then the primary one."""
        primary = self._settings.primary_locale
        return [locale] if locale == primary else [locale, primary]

    def resolve(self, entry_id: int, locale: str) -> str:
        for candidate in self.fallback_chain(locale):
            content = self._read(entry_id, candidate)
            if content is not None:
                if candidate != locale:
                    log.debug(
                        "content_locale_fallback",
                        entry_id=entry_id,
                        requested=locale,
                        served=candidate,
                    )
                return content

        log.info("content_pending", entry_id=entry_id, locale=locale)
        return self.placeholder(entry_id, locale)

    def placeholder(self, entry_id: int, locale: str) -> str:
        name = self._metadata.display_name(entry_id, locale)
        return f"# {name}\n\n{self._settings.pending_message(locale)}"

    def _read(self, entry_id: int, locale: str) -> str | None:
        path = self._metadata.file_path(entry_id, locale)
        if not path or not self._files.exists(path):
            return None
        try:
            raw = self._files.read_bytes(path)
        except OSError:
            # Removed or unreadable between the existence check and the read
            log.warning("content_read_error", entry_id=entry_id, path=path, exc_info=True)
            return None
        return raw.decode("utf-8", errors="replace")
