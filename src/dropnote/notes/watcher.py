"""Notes file watcher — reports out-of-band changes to the notes file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class _NotesFileEventHandler(FileSystemEventHandler):
    """Filters directory events down to the one notes file."""

    def __init__(self, notes_path: Path, on_change: Callable[[], None]) -> None:
        self.notes_path = notes_path.resolve()
        self.on_change = on_change

    def _is_notes_file(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.notes_path

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_notes_file(event.src_path):
            logger.info("Notes file created: %s", event.src_path)
            self.on_change()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_notes_file(event.src_path):
            logger.debug("Notes file modified: %s", event.src_path)
            self.on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves land as a rename onto the notes file
        if not event.is_directory and self._is_notes_file(event.dest_path):
            logger.debug("Notes file replaced: %s", event.dest_path)
            self.on_change()


class NotesFileWatcher:
    """Watches the notes file for changes.

    Usage:
        watcher = NotesFileWatcher(path, on_change=scheduler.handle_change)
        watcher.start()  # non-blocking
        ...
        watcher.stop()
    """

    def __init__(self, notes_path: Path, on_change: Callable[[], None]) -> None:
        self.notes_path = notes_path
        self.handler = _NotesFileEventHandler(notes_path, on_change)
        self._observer: Observer | None = None

    def start(self) -> None:
        """Start watching the notes directory (non-blocking)."""
        directory = self.notes_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        self._observer = Observer()
        self._observer.schedule(self.handler, str(directory), recursive=False)
        self._observer.start()
        logger.info("Watching notes file at %s", self.notes_path)

    def stop(self) -> None:
        """Stop the watcher."""
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("Notes watcher stopped")
