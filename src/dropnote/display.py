"""Terminal rendering for search results."""

from __future__ import annotations

from datetime import timedelta, tzinfo
from typing import TYPE_CHECKING

from rich.table import Table
from rich.text import Text

from dropnote.notes.models import as_utc, utc_now

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from dropnote.search.models import SearchResult

HIGHLIGHT_STYLE = "bold cyan"
TITLE_MATCH_BADGE = "title match"


def format_relative_date(
    moment: datetime,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Short human label for *moment* relative to *now*.

    ``"today, 14:05"``, ``"yesterday"``, a weekday name within the last
    week, else ``"DD-MM-YYYY"``. Calendar days are taken in *tz* (local
    time zone by default).
    """
    local = as_utc(moment).astimezone(tz)
    local_now = as_utc(now if now is not None else utc_now()).astimezone(tz)

    if local.date() == local_now.date():
        return f"today, {local:%H:%M}"
    if local.date() == local_now.date() - timedelta(days=1):
        return "yesterday"
    if (local_now - local).days < 7:
        return f"{local:%A}"
    return f"{local:%d-%m-%Y}"


def highlight_preview(result: SearchResult) -> Text:
    """The result preview with every highlight range emphasised."""
    text = Text(result.preview)
    for span in result.highlight_ranges:
        text.stylize(HIGHLIGHT_STYLE, span.start, span.end)
    return text


def render_results(
    results: Sequence[SearchResult],
    now: datetime | None = None,
    *,
    title: str | None = None,
    tz: tzinfo | None = None,
) -> Table:
    """Build a table of results: index, note title, preview, and date."""
    table = Table(title=title, show_header=True, header_style="bold magenta", box=None)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold", no_wrap=True)
    table.add_column("Preview", overflow="fold")
    table.add_column("Modified", justify="right")

    for i, result in enumerate(results, start=1):
        name = Text(result.note.title or "(untitled)")
        if result.matched_in_title:
            name.append(f" [{TITLE_MATCH_BADGE}]", style="cyan")
        table.add_row(
            str(i),
            name,
            highlight_preview(result),
            format_relative_date(result.note.last_modified, now, tz),
        )
    return table
