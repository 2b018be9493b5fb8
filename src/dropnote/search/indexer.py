"""Index builder — turns raw notes into query-ready entries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dropnote.notes.models import as_utc, utc_now
from dropnote.search.models import IndexedNote

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from dropnote.notes.models import Note

logger = logging.getLogger(__name__)


def fold_case(text: str) -> str:
    """Locale-independent lower-case fold that keeps string length.

    Each character is lowered on its own, so the fold of a substring is
    always a substring of the fold (no contextual final sigma). Characters
    whose lower-case form expands to several code points (e.g. ``"İ"``)
    are kept as-is, so offsets found in folded text are valid in the
    original.
    """
    return "".join(low if len(low := c.lower()) == 1 else c for c in text)


def index_note(note: Note, now: datetime) -> IndexedNote:
    return IndexedNote(
        id=note.id,
        title=note.title,
        text=note.text,
        last_modified=note.last_modified if note.last_modified is not None else now,
        title_lowercased=fold_case(note.title),
        text_lowercased=fold_case(note.text),
    )


def build_index(notes: Iterable[Note], now: datetime | None = None) -> list[IndexedNote]:
    """Build one index entry per note, in input order.

    Notes without a modification date are stamped with *now* (the current
    UTC time by default). The stamp lives only in the index.
    """
    resolved_now = as_utc(now) if now is not None else utc_now()
    entries = [index_note(note, resolved_now) for note in notes]
    logger.debug("Built index with %d entries", len(entries))
    return entries
