"""Note search service — owns the in-memory index and answers queries.

One instance per process, passed to whoever needs it. The index is a
tuple snapshot replaced wholesale on every rebuild, so a search running
alongside a rebuild sees either the old or the new index, never a mix.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from dropnote.notes.models import as_utc, utc_now
from dropnote.search.indexer import build_index, fold_case
from dropnote.search.models import SearchResult
from dropnote.search.preview import find_highlight_ranges, get_preview
from dropnote.search.ranking import score_note

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from dropnote.notes.models import Note
    from dropnote.notes.store import NoteStore
    from dropnote.search.models import IndexedNote

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
RECENT_PREVIEW_LENGTH = 80
MATCH_PREVIEW_LENGTH = 100


class NoteSearchService:
    """In-memory full-text search over the note collection.

    Parameters
    ----------
    on_diagnostic:
        Optional callback receiving a human-readable message whenever the
        note source could not be read and the index fell back to empty.
    recent_preview_length / match_preview_length:
        Preview target lengths for recency listings and query hits.
    """

    def __init__(
        self,
        on_diagnostic: Callable[[str], None] | None = None,
        *,
        recent_preview_length: int = RECENT_PREVIEW_LENGTH,
        match_preview_length: int = MATCH_PREVIEW_LENGTH,
    ) -> None:
        self._on_diagnostic = on_diagnostic
        self._recent_preview_length = recent_preview_length
        self._match_preview_length = match_preview_length
        self._index: tuple[IndexedNote, ...] = ()
        self._swap_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Index maintenance
    # ------------------------------------------------------------------

    def rebuild(self, notes: Iterable[Note], now: datetime | None = None) -> int:
        """Replace the index with entries built from *notes*. Returns the entry count."""
        index = tuple(build_index(notes, now))
        with self._swap_lock:
            self._index = index
        logger.info("Indexed %d notes", len(index))
        return len(index)

    def rebuild_from_store(self, store: NoteStore, now: datetime | None = None) -> int:
        """Rebuild from the notes file; an unreadable file yields an empty index."""
        notes = store.load_notes()
        if notes is None:
            logger.warning("Notes at %s could not be loaded; search index is empty", store.path)
            self._report(f"Notes at {store.path} could not be loaded; search index is empty")
            notes = []
        return self.rebuild(notes, now)

    @property
    def indexed_notes(self) -> tuple[IndexedNote, ...]:
        """Current index snapshot (read-only)."""
        return self._index

    def __len__(self) -> int:
        return len(self._index)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        now: datetime | None = None,
    ) -> list[SearchResult]:
        """Return up to *limit* results for *query*, best first.

        A blank query lists the most recently modified notes instead.
        *now* fixes the reference time for the recency bonus.
        """
        if limit <= 0:
            return []

        index = self._index
        trimmed = query.strip()
        if not trimmed:
            return self._recent(index, limit)

        resolved_now = as_utc(now) if now is not None else utc_now()
        return self._match(index, fold_case(trimmed), limit, resolved_now)

    def _recent(self, index: tuple[IndexedNote, ...], limit: int) -> list[SearchResult]:
        by_id = sorted(index, key=lambda n: str(n.id))
        ordered = sorted(by_id, key=lambda n: n.last_modified, reverse=True)
        return [
            SearchResult(
                id=note.id,
                note=note,
                score=0.0,
                matched_in_title=False,
                preview=get_preview(note.text, "", self._recent_preview_length),
                highlight_ranges=[],
            )
            for note in ordered[:limit]
        ]

    def _match(
        self,
        index: tuple[IndexedNote, ...],
        query: str,
        limit: int,
        now: datetime,
    ) -> list[SearchResult]:
        scored = []
        for note in index:
            breakdown = score_note(note, query, now)
            if breakdown.matched:
                scored.append((note, breakdown))

        # Ties on score fall back to id order
        scored.sort(key=lambda item: (-item[1].total, str(item[0].id)))

        results: list[SearchResult] = []
        for note, breakdown in scored[:limit]:
            preview = get_preview(note.text, query, self._match_preview_length)
            results.append(
                SearchResult(
                    id=note.id,
                    note=note,
                    score=breakdown.total,
                    matched_in_title=breakdown.matched_in_title,
                    preview=preview,
                    highlight_ranges=find_highlight_ranges(preview, query),
                )
            )
        logger.debug("Query %r matched %d notes, returning %d", query, len(scored), len(results))
        return results

    def _report(self, message: str) -> None:
        if self._on_diagnostic is None:
            return
        try:
            self._on_diagnostic(message)
        except Exception:
            logger.exception("Diagnostic callback failed")
