"""Tests for the click CLI — add, search, recent, stats, watch."""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner
from rich.console import Console

from dropnote import __version__
from dropnote.cli import cli

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def notes_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for key in [k for k in os.environ if k.startswith("DROPNOTE_")]:
        monkeypatch.delenv(key)
    path = tmp_path / "notes.json"
    monkeypatch.setenv("DROPNOTE_STORAGE__NOTES_PATH", str(path))
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestAdd:
    def test_creates_notes_file(self, runner: CliRunner, notes_path: Path) -> None:
        result = runner.invoke(cli, ["add", "Groceries", "milk and eggs"])
        assert result.exit_code == 0, result.output
        assert "Added note" in result.output
        assert notes_path.is_file()

    def test_unreadable_file_fails(self, runner: CliRunner, notes_path: Path) -> None:
        notes_path.write_text("garbage")
        result = runner.invoke(cli, ["add", "Groceries"])
        assert result.exit_code == 1
        assert "unreadable" in result.output


class TestSearch:
    def test_finds_added_note(self, runner: CliRunner, notes_path: Path) -> None:
        runner.invoke(cli, ["add", "Groceries", "milk and eggs"])
        runner.invoke(cli, ["add", "Budget", "rent"])
        result = runner.invoke(cli, ["search", "milk"])
        assert result.exit_code == 0, result.output
        assert "Groceries" in result.output
        assert "Budget" not in result.output

    def test_no_results(self, runner: CliRunner, notes_path: Path) -> None:
        runner.invoke(cli, ["add", "Groceries", "milk"])
        result = runner.invoke(cli, ["search", "zebra"])
        assert result.exit_code == 0
        assert "No notes found" in result.output

    def test_missing_notes_file_is_not_an_error(
        self, runner: CliRunner, notes_path: Path
    ) -> None:
        result = runner.invoke(cli, ["search", "anything"])
        assert result.exit_code == 0
        assert "No notes found" in result.output

    def test_limit_option(self, runner: CliRunner, notes_path: Path) -> None:
        for title in ["Plan one", "Plan two", "Plan three"]:
            runner.invoke(cli, ["add", title])
        result = runner.invoke(cli, ["search", "plan", "--limit", "1"])
        assert result.exit_code == 0
        assert sum(t in result.output for t in ["Plan one", "Plan two", "Plan three"]) == 1


class TestRecent:
    def test_lists_notes(self, runner: CliRunner, notes_path: Path) -> None:
        runner.invoke(cli, ["add", "Groceries"])
        result = runner.invoke(cli, ["recent"])
        assert result.exit_code == 0
        assert "Recent Notes" in result.output
        assert "Groceries" in result.output

    def test_empty(self, runner: CliRunner, notes_path: Path) -> None:
        result = runner.invoke(cli, ["recent"])
        assert result.exit_code == 0
        assert "No notes yet" in result.output


class TestStats:
    def test_counts(self, runner: CliRunner, notes_path: Path) -> None:
        runner.invoke(cli, ["add", "Groceries"])
        runner.invoke(cli, ["add", "Budget"])
        result = runner.invoke(cli, ["stats"])
        assert result.exit_code == 0
        assert "Total notes: 2" in result.output
        assert "Missing modification date: 0" in result.output

    def test_missing_file(self, runner: CliRunner, notes_path: Path) -> None:
        result = runner.invoke(cli, ["stats"])
        assert result.exit_code == 0
        assert "missing" in result.output


class TestDiagnostics:
    def test_bracketed_path_printed_literally(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import dropnote.cli as cli_module
        from dropnote.config import Settings, StorageConfig

        recorder = Console(record=True, width=400)
        monkeypatch.setattr(cli_module, "console", recorder)
        notes = tmp_path / "[work]" / "notes.json"
        notes.parent.mkdir()
        notes.write_text("garbage")

        settings = Settings(storage=StorageConfig(notes_path=notes))
        store, service = cli_module._build_search(settings)
        service.rebuild_from_store(store)

        output = recorder.export_text()
        assert f"{tmp_path}/[work]/notes.json" in output
        assert "could not be loaded" in output


class TestWatch:
    @pytest.fixture(autouse=True)
    def _stop_after_first_rebuild(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def _cancelled(_delay: float) -> None:
            raise asyncio.CancelledError

        monkeypatch.setattr("dropnote.cli.asyncio.sleep", _cancelled)

    def test_initial_rebuild_prints_query_results(
        self, runner: CliRunner, notes_path: Path
    ) -> None:
        runner.invoke(cli, ["add", "Groceries", "milk and eggs"])
        runner.invoke(cli, ["add", "Budget", "rent"])
        result = runner.invoke(cli, ["watch", "milk"])
        assert result.exit_code == 0, result.output
        assert "Watching" in result.output
        assert "Results for 'milk'" in result.output
        assert "Groceries" in result.output
        assert "Budget" not in result.output

    def test_without_query_prints_no_results(
        self, runner: CliRunner, notes_path: Path
    ) -> None:
        runner.invoke(cli, ["add", "Groceries"])
        result = runner.invoke(cli, ["watch"])
        assert result.exit_code == 0, result.output
        assert "Groceries" not in result.output
