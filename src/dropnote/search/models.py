"""Index entries and query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class IndexedNote:
    """Query-ready copy of a note.

    ``title_lowercased`` and ``text_lowercased`` are the case-folded
    title and text as of the index build.
    """

    id: UUID
    title: str
    text: str
    last_modified: datetime
    title_lowercased: str
    text_lowercased: str


@dataclass(frozen=True, slots=True)
class HighlightRange:
    """Half-open ``[start, end)`` span within a preview string."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def as_slice(self) -> slice:
        return slice(self.start, self.end)


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A single ranked hit. ``score`` is 0 for recency listings."""

    id: UUID
    note: IndexedNote
    score: float
    matched_in_title: bool
    preview: str
    highlight_ranges: list[HighlightRange] = field(default_factory=list)
