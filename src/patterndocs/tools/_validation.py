"""Input checks shared by the entry tool handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patterndocs.errors import ErrorCode, PatternDocsError
from patterndocs.models.tools import EntryRequestInput

if TYPE_CHECKING:
    from patterndocs.models.catalog import EntryRecord
    from patterndocs.state import AppState


def validate_entry_request(
    entry_id: int, locale: str, state: AppState
) -> tuple[EntryRequestInput, EntryRecord]:
    """Validate the request shape, the locale, and that the entry exists."""
    try:
        validated = EntryRequestInput(entry_id=entry_id, locale=locale)
    except ValueError as exc:
        raise PatternDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a positive integer entry_id and a locale code.",
            recoverable=False,
        ) from exc

    supported = state.settings.content.locales
    if validated.locale not in supported:
        raise PatternDocsError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Unsupported locale: {validated.locale!r}",
            suggestion=f"Use one of: {', '.join(supported)}.",
            recoverable=False,
        )

    entry = state.catalog.get(validated.entry_id)
    if entry is None:
        raise PatternDocsError(
            code=ErrorCode.ENTRY_NOT_FOUND,
            message=f"Entry {validated.entry_id} not found in catalog.",
            suggestion="Check the entry id, or call reload_catalog if it was just added.",
            recoverable=False,
        )
    return validated, entry
