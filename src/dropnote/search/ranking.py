"""Heuristic relevance scoring for note search.

A note's score is the sum of three parts:

* **title** — tiered by how specifically the query matches the title:
  exact (1000), prefix (500), word start (400), anywhere (300).
* **body** — 200 if the body starts with the query, otherwise 50 per
  non-overlapping occurrence.
* **recency** — ``max(0, 100 - days_since_modified) * 0.5``, added only
  when the title or body matched.

All inputs are expected to be case-folded already.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from dropnote.search.models import IndexedNote

# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

TITLE_EXACT_SCORE = 1000.0
TITLE_PREFIX_SCORE = 500.0
TITLE_WORD_START_SCORE = 400.0
TITLE_CONTAINS_SCORE = 300.0

BODY_PREFIX_SCORE = 200.0
BODY_OCCURRENCE_SCORE = 50.0

RECENCY_WINDOW_DAYS = 100.0
RECENCY_WEIGHT = 0.5

_SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True, slots=True)
class NoteScore:
    """Score breakdown for one note against one query."""

    title: float
    body: float
    recency: float

    @property
    def matched(self) -> bool:
        return self.title + self.body > 0

    @property
    def matched_in_title(self) -> bool:
        return self.title > 0

    @property
    def total(self) -> float:
        return self.title + self.body + self.recency


def title_score(title: str, query: str) -> float:
    if query not in title:
        return 0.0
    if title == query:
        return TITLE_EXACT_SCORE
    if title.startswith(query):
        return TITLE_PREFIX_SCORE
    if " " + query in title:
        return TITLE_WORD_START_SCORE
    return TITLE_CONTAINS_SCORE


def body_score(text: str, query: str) -> float:
    if query not in text:
        return 0.0
    if text.startswith(query):
        return BODY_PREFIX_SCORE
    return BODY_OCCURRENCE_SCORE * text.count(query)


def recency_bonus(last_modified: datetime, now: datetime) -> float:
    """Linear decay from 50 (just modified) to 0 at 100 days old."""
    days = (now - last_modified).total_seconds() / _SECONDS_PER_DAY
    return max(0.0, RECENCY_WINDOW_DAYS - days) * RECENCY_WEIGHT


def score_note(note: IndexedNote, query: str, now: datetime) -> NoteScore:
    """Score *note* against a non-empty, case-folded *query*.

    Notes with neither a title nor a body match get no recency bonus, so
    ``NoteScore.matched`` is False and the note should be dropped.
    """
    title = title_score(note.title_lowercased, query)
    body = body_score(note.text_lowercased, query)
    if title + body == 0:
        return NoteScore(title=0.0, body=0.0, recency=0.0)
    return NoteScore(title=title, body=body, recency=recency_bonus(note.last_modified, now))
