"""Search — in-memory index, relevance ranking, previews, and highlights."""

from dropnote.search.indexer import build_index, fold_case
from dropnote.search.models import HighlightRange, IndexedNote, SearchResult
from dropnote.search.preview import find_highlight_ranges, get_preview
from dropnote.search.service import NoteSearchService

__all__ = [
    "HighlightRange",
    "IndexedNote",
    "NoteSearchService",
    "SearchResult",
    "build_index",
    "find_highlight_ranges",
    "fold_case",
    "get_preview",
]
