from __future__ import annotations

from patterndocs.models.cache import KeyRegistryRecord
from patterndocs.models.catalog import EntryChange, EntryRecord
from patterndocs.models.toc import TocEntry
from patterndocs.models.tools import (
    EntryRequestInput,
    GetEntryTocOutput,
    ReadEntryOutput,
)

__all__ = [
    # catalog
    "EntryRecord",
    "EntryChange",
    # toc
    "TocEntry",
    # cache
    "KeyRegistryRecord",
    # tools
    "EntryRequestInput",
    "ReadEntryOutput",
    "GetEntryTocOutput",
]
