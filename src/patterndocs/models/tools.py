from __future__ import annotations

from pydantic import BaseModel, Field

from patterndocs.models.toc import TocEntry


class EntryRequestInput(BaseModel):
    entry_id: int = Field(ge=1)
    locale: str = Field(min_length=1, max_length=16)


class ReadEntryOutput(BaseModel):
    entry_id: int
    slug: str
    locale: str
    name: str
    content: str


class GetEntryTocOutput(BaseModel):
    entry_id: int
    locale: str
    toc: list[TocEntry]
