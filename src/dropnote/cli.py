"""CLI entry point for DropNote.

Commands:
    dropnote search QUERY  — Ranked search over all notes
    dropnote recent        — Most recently modified notes
    dropnote add TITLE     — Append a note to the notes file
    dropnote stats         — Show note store statistics
    dropnote watch         — Keep the index live while the notes file changes
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from dropnote import __version__

if TYPE_CHECKING:
    from dropnote.config import Settings
    from dropnote.notes.store import NoteStore
    from dropnote.search.service import NoteSearchService

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _create_store(settings: Settings) -> NoteStore:
    from dropnote.notes.store import NoteStore

    return NoteStore(
        settings.storage.notes_path, backfill_timestamps=settings.storage.backfill_timestamps
    )


def _build_search(settings: Settings) -> tuple[NoteStore, NoteSearchService]:
    """Create the note store and an empty search service."""
    from dropnote.search.service import NoteSearchService

    store = _create_store(settings)
    service = NoteSearchService(
        on_diagnostic=lambda msg: console.print(f"[yellow]![/yellow] {escape(msg)}"),
        recent_preview_length=settings.search.recent_preview_length,
        match_preview_length=settings.search.match_preview_length,
    )
    return store, service


def _print_results(service: NoteSearchService, query: str, limit: int) -> None:
    from dropnote.display import render_results

    results = service.search(query, limit=limit)
    if not results:
        if query.strip():
            console.print(f"[dim]No notes found for '{escape(query)}'.[/dim]")
        else:
            console.print("[dim]No notes yet.[/dim]")
        return
    heading = f"Results for '{escape(query.strip())}'" if query.strip() else "Recent Notes"
    console.print(render_results(results, title=heading))


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(exists=True), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """DropNote — quick search over your notes."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None


@cli.command()
@click.argument("query")
@click.option("-n", "--limit", type=int, default=None, help="Maximum number of results")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int | None) -> None:
    """Search notes by title and text."""
    from dropnote.config import load_settings

    settings = load_settings(ctx.obj.get("config_path"))
    store, service = _build_search(settings)
    service.rebuild_from_store(store)
    _print_results(service, query, limit if limit is not None else settings.search.default_limit)


@cli.command()
@click.option("-n", "--limit", type=int, default=None, help="Maximum number of notes")
@click.pass_context
def recent(ctx: click.Context, limit: int | None) -> None:
    """List the most recently modified notes."""
    from dropnote.config import load_settings

    settings = load_settings(ctx.obj.get("config_path"))
    store, service = _build_search(settings)
    service.rebuild_from_store(store)
    _print_results(service, "", limit if limit is not None else settings.search.default_limit)


@cli.command()
@click.argument("title")
@click.argument("text", required=False, default="")
@click.pass_context
def add(ctx: click.Context, title: str, text: str) -> None:
    """Append a new note to the notes file."""
    from dropnote.config import load_settings
    from dropnote.notes.store import NoteStoreError

    settings = load_settings(ctx.obj.get("config_path"))
    store = _create_store(settings)
    try:
        note = store.add_note(title, text)
    except NoteStoreError as exc:
        console.print(f"[red]✗[/red] {exc}")
        sys.exit(1)
    console.print(f"[green]✓[/green] Added note '{escape(note.title)}' ({note.id})")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show note store statistics."""
    from dropnote.config import load_settings

    settings = load_settings(ctx.obj.get("config_path"))
    store = _create_store(settings)
    notes = store.load_notes(backfill=False)

    console.print("\n[bold]DropNote Statistics[/bold]\n")
    console.print(f"[bold]Notes file:[/bold] {store.path}")
    if notes is None:
        state = "missing" if not store.exists else "unreadable"
        console.print(f"  [yellow]Notes file is {state}[/yellow]")
        return

    undated = sum(1 for n in notes if n.last_modified is None)
    console.print(f"  Total notes: {len(notes)}")
    console.print(f"  Pinned: {sum(1 for n in notes if n.is_pinned)}")
    console.print(f"  Locked: {sum(1 for n in notes if n.is_locked)}")
    console.print(f"  Missing modification date: {undated}")


@cli.command()
@click.argument("query", required=False, default="")
@click.option("-n", "--limit", type=int, default=None, help="Maximum number of results")
@click.pass_context
def watch(ctx: click.Context, query: str, limit: int | None) -> None:
    """Watch the notes file and reindex on every change."""
    from dropnote.config import load_settings
    from dropnote.notes.reindex import ReindexScheduler
    from dropnote.notes.watcher import NotesFileWatcher

    settings = load_settings(ctx.obj.get("config_path"))
    store, service = _build_search(settings)
    effective_limit = limit if limit is not None else settings.search.default_limit

    def _on_rebuilt(count: int) -> None:
        if query:
            _print_results(service, query, effective_limit)

    scheduler = ReindexScheduler(settings.watch, store, service, on_rebuilt=_on_rebuilt)
    watcher = NotesFileWatcher(store.path, on_change=scheduler.handle_change)

    console.print(f"[green]✓[/green] Watching {store.path}")
    console.print(f"  Debounce: {settings.watch.debounce_ms}ms")
    console.print(f"  Hash stability: {settings.watch.hash_stability_check}")

    async def _run_watch() -> None:
        await scheduler.rebuild_now()
        watcher.start()
        try:
            while True:
                await asyncio.sleep(1)
        except asyncio.CancelledError:
            pass
        finally:
            scheduler.cancel()
            watcher.stop()

    try:
        asyncio.run(_run_watch())
    except KeyboardInterrupt:
        watcher.stop()
        console.print("\n[yellow]Watcher stopped.[/yellow]")


if __name__ == "__main__":
    cli()
