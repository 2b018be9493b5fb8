"""Notes — the note record, JSON file storage, and change-driven reindexing."""

from dropnote.notes.models import Note
from dropnote.notes.reindex import ReindexScheduler
from dropnote.notes.store import NoteStore, NoteStoreError
from dropnote.notes.watcher import NotesFileWatcher

__all__ = [
    "Note",
    "NoteStore",
    "NoteStoreError",
    "NotesFileWatcher",
    "ReindexScheduler",
]
