"""Tool handler for read_entry.

Receives AppState, validates input, and returns the entry's Markdown through
the cached content service. No MCP or FastMCP imports; server.py handles the
MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from patterndocs.models.tools import ReadEntryOutput
from patterndocs.tools._validation import validate_entry_request

if TYPE_CHECKING:
    from patterndocs.state import AppState


async def handle(entry_id: int, locale: str, state: AppState) -> dict:
    """Handle a read_entry tool call."""
    log = structlog.get_logger().bind(tool="read_entry", entry_id=entry_id, locale=locale)
    log.info("handler_called")

    validated, entry = validate_entry_request(entry_id, locale, state)
    content = await state.content.get_content(validated.entry_id, validated.locale)

    output = ReadEntryOutput(
        entry_id=entry.id,
        slug=entry.slug,
        locale=validated.locale,
        name=state.catalog.display_name(entry.id, validated.locale),
        content=content,
    )
    return output.model_dump(mode="json")
