"""JSON file persistence for the note collection."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from dropnote.notes.models import Note, utc_now

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_NOTE_LIST = TypeAdapter(list[Note])


class NoteStoreError(Exception):
    """Raised when the notes file cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write notes file '{path}': {reason}")


class NoteStore:
    """Reads and writes the notes file (a JSON array of note objects)."""

    def __init__(self, path: Path, *, backfill_timestamps: bool = True) -> None:
        self.path = path
        self.backfill_timestamps = backfill_timestamps

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def load_notes(self, *, backfill: bool | None = None) -> list[Note] | None:
        """Load all notes, or ``None`` if the file is missing or unreadable.

        With *backfill* (defaults to the store setting), notes lacking a
        modification date are stamped with the current time and the file is
        re-saved once.
        """
        if not self.exists:
            logger.info("Notes file does not exist: %s", self.path)
            return None

        try:
            raw = self.path.read_text(encoding="utf-8")
            notes = _NOTE_LIST.validate_python(json.loads(raw))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Failed to load notes from %s: %s", self.path, exc)
            return None

        logger.debug("Loaded %d notes from %s", len(notes), self.path)

        if backfill is None:
            backfill = self.backfill_timestamps
        if backfill and self._backfill_modified_dates(notes):
            try:
                self.save_notes(notes)
            except NoteStoreError:
                logger.exception("Failed to persist backfilled timestamps")

        return notes

    def save_notes(self, notes: list[Note]) -> None:
        """Write *notes* atomically (temp file + rename)."""
        payload = _NOTE_LIST.dump_json(notes, by_alias=True, exclude_none=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise NoteStoreError(self.path, str(exc)) from exc
        logger.debug("Saved %d notes to %s", len(notes), self.path)

    def add_note(self, title: str, text: str = "") -> Note:
        """Append a new note stamped with the current time and persist it."""
        notes = self.load_notes()
        if notes is None:
            if self.exists:
                raise NoteStoreError(self.path, "existing notes file is unreadable")
            notes = []
        note = Note(title=title, text=text, last_modified=utc_now())
        notes.append(note)
        self.save_notes(notes)
        logger.info("Added note %s (%r)", note.id, title)
        return note

    @staticmethod
    def _backfill_modified_dates(notes: list[Note]) -> bool:
        """Stamp notes that have no modification date. Returns True if any changed."""
        now = utc_now()
        changed = 0
        for note in notes:
            if note.last_modified is None:
                note.update_modified_date(now)
                changed += 1
        if changed:
            logger.info("Backfilled modification date on %d notes", changed)
        return changed > 0
