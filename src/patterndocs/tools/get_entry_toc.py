"""Tool handler for get_entry_toc."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from patterndocs.models.tools import GetEntryTocOutput
from patterndocs.tools._validation import validate_entry_request

if TYPE_CHECKING:
    from patterndocs.state import AppState


async def handle(entry_id: int, locale: str, state: AppState) -> dict:
    """Handle a get_entry_toc tool call."""
    log = structlog.get_logger().bind(tool="get_entry_toc", entry_id=entry_id, locale=locale)
    log.info("handler_called")

    validated, entry = validate_entry_request(entry_id, locale, state)
    toc = await state.content.get_toc(validated.entry_id, validated.locale)

    output = GetEntryTocOutput(entry_id=entry.id, locale=validated.locale, toc=toc)
    return output.model_dump(mode="json")
