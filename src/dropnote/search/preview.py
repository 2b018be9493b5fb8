"""Preview excerpts and highlight ranges for search results."""

from __future__ import annotations

from dropnote.search.indexer import fold_case
from dropnote.search.models import HighlightRange

ELLIPSIS = "..."
# Characters of context kept before the first match
CONTEXT_BEFORE = 20


def get_preview(text: str, query: str, max_length: int) -> str:
    """Return a bounded excerpt of *text*, centred on the first match of *query*.

    With a match, the window starts ``CONTEXT_BEFORE`` characters ahead of it
    and runs to ``start + len(query) + max_length - CONTEXT_BEFORE``; an
    ellipsis marks each side that was cut. Without a query or a match, the
    first *max_length* characters are returned.
    """
    clean = text.strip()
    if not clean:
        return ""

    if query:
        start = fold_case(clean).find(fold_case(query))
        if start != -1:
            context_start = max(0, start - CONTEXT_BEFORE)
            context_end = min(len(clean), start + len(query) + max_length - CONTEXT_BEFORE)
            preview = clean[context_start:context_end]
            if context_start > 0:
                preview = ELLIPSIS + preview
            if context_end < len(clean):
                preview = preview + ELLIPSIS
            return preview

    if len(clean) > max_length:
        return clean[:max_length] + ELLIPSIS
    return clean


def find_highlight_ranges(text: str, query: str) -> list[HighlightRange]:
    """All non-overlapping case-insensitive occurrences of *query* in *text*."""
    if not query:
        return []

    haystack = fold_case(text)
    needle = fold_case(query)
    ranges: list[HighlightRange] = []
    pos = haystack.find(needle)
    while pos != -1:
        end = pos + len(needle)
        ranges.append(HighlightRange(pos, end))
        pos = haystack.find(needle, end)
    return ranges
