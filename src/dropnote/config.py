"""Configuration management for DropNote.

Loads from environment variables, .env files, and config/default.toml.
Environment variables use the ``DROPNOTE_`` prefix with ``__`` as the
nested delimiter, e.g. ``DROPNOTE_STORAGE__NOTES_PATH``.

Default notes file: ~/Library/Application Support/DropNote/notes.json
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DROPNOTE_HOME = Path.home() / "Library" / "Application Support" / "DropNote"


class StorageConfig(BaseSettings):
    """Note storage configuration."""

    notes_path: Path = Field(
        default_factory=lambda: DROPNOTE_HOME / "notes.json",
        description="JSON file holding the note collection",
    )
    backfill_timestamps: bool = True

    @field_validator("notes_path")
    @classmethod
    def expand_notes_path(cls, v: Path) -> Path:
        return v.expanduser()


class SearchConfig(BaseSettings):
    """Search defaults."""

    default_limit: int = 10
    recent_preview_length: int = 80
    match_preview_length: int = 100


class WatchConfig(BaseSettings):
    """Change-driven reindex configuration."""

    debounce_ms: int = 500
    hash_stability_check: bool = True


class Settings(BaseSettings):
    """Root configuration — aggregates all sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="DROPNOTE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)

    @classmethod
    def from_toml(cls, path: Path | None = None) -> Settings:
        """Load settings from TOML file, with env var overrides."""
        config_path = path or Path("config/default.toml")
        if config_path.exists():
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            return cls(**data)
        return cls()


def load_settings(config_path: Path | None = None) -> Settings:
    """Load and validate settings. Entry point for all config access."""
    return Settings.from_toml(config_path)
