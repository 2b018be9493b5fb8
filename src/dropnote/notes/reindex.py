"""Debounced, hash-stable reindexing on notes file changes.

Bridges raw watcher events to ``NoteSearchService.rebuild_from_store``:

* **Debounce** — a burst of change events (editors often write several
  times per save) collapses into one rebuild after ``debounce_ms`` of
  silence.
* **Hash stability** — before rebuilding, the file is hashed; if the hash
  differs from the last indexed one it is re-hashed after another
  ``debounce_ms`` window, and the rebuild only proceeds once two
  consecutive hashes agree. Unchanged content is skipped outright.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from dropnote.config import WatchConfig
    from dropnote.notes.store import NoteStore
    from dropnote.search.service import NoteSearchService

logger = logging.getLogger(__name__)


def _file_content_hash(path: Path) -> str | None:
    """SHA-256 of file content, first 16 hex chars; ``None`` if the file is gone."""
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()[:16]
    except FileNotFoundError:
        return None


class ReindexScheduler:
    """Rebuilds the search index when the notes file changes.

    :meth:`handle_change` may be called from any thread (e.g. the watchdog
    observer); work is marshalled onto the event loop captured at the first
    call or passed in as *loop*.

    Parameters
    ----------
    config:
        Debounce and hash-stability settings.
    store:
        Note store the index is rebuilt from.
    service:
        Search service whose index is replaced.
    on_rebuilt:
        Optional callback receiving the new index size after each rebuild.
    """

    def __init__(
        self,
        config: WatchConfig,
        store: NoteStore,
        service: NoteSearchService,
        *,
        on_rebuilt: Callable[[int], None] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._service = service
        self._on_rebuilt = on_rebuilt
        self._loop = loop

        self._pending: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._last_hash: str | None = None
        self._has_indexed = False
        self._rebuild_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle_change(self) -> None:
        """Entry point for watcher callbacks; schedules a debounced rebuild."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._loop.call_soon_threadsafe(self._schedule)

    async def rebuild_now(self) -> int:
        """Rebuild immediately, bypassing debounce and hash checks."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        current_hash = await asyncio.to_thread(_file_content_hash, self._store.path)
        return await self._rebuild(current_hash)

    @property
    def pending(self) -> bool:
        """True while a debounced rebuild is waiting to fire."""
        return self._pending is not None

    @property
    def rebuild_count(self) -> int:
        return self._rebuild_count

    def cancel(self) -> None:
        """Drop any pending rebuild."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # ------------------------------------------------------------------
    # Internal processing
    # ------------------------------------------------------------------

    @property
    def _debounce_s(self) -> float:
        return self._config.debounce_ms / 1000.0

    def _schedule(self) -> None:
        assert self._loop is not None
        self.cancel()

        def _fire() -> None:
            self._pending = None
            self._task = self._loop.create_task(self._process_change())  # type: ignore[union-attr]

        self._pending = self._loop.call_later(self._debounce_s, _fire)

    async def _process_change(self) -> None:
        path = self._store.path
        try:
            current_hash = await asyncio.to_thread(_file_content_hash, path)
        except OSError:
            logger.warning("Cannot read %s, skipping", path)
            return

        changed = not self._has_indexed or current_hash != self._last_hash

        if self._config.hash_stability_check and changed:
            await asyncio.sleep(self._debounce_s)
            try:
                recheck_hash = await asyncio.to_thread(_file_content_hash, path)
            except OSError:
                logger.warning("Cannot re-read %s, skipping", path)
                return
            if recheck_hash != current_hash:
                logger.debug("Hash unstable for %s, re-debouncing", path)
                self._schedule()
                return

        if not changed:
            logger.debug("Content unchanged for %s, skipping", path)
            return

        try:
            await self._rebuild(current_hash)
        except Exception:
            logger.exception("Reindex of %s failed", path)

    async def _rebuild(self, current_hash: str | None) -> int:
        count = await asyncio.to_thread(self._service.rebuild_from_store, self._store)
        self._last_hash = current_hash
        self._has_indexed = True
        self._rebuild_count += 1
        logger.info("Reindexed %d notes from %s", count, self._store.path)
        if self._on_rebuilt is not None:
            self._on_rebuilt(count)
        return count
