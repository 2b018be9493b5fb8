"""Note record as persisted by the DropNote app."""

from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Timestamps are stored as seconds since 2001-01-01T00:00:00Z
APPLE_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)


def as_utc(moment: datetime) -> datetime:
    """Return *moment* as an aware UTC datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def from_apple_timestamp(seconds: float) -> datetime:
    return APPLE_REFERENCE_DATE + timedelta(seconds=seconds)


def to_apple_timestamp(moment: datetime) -> float:
    return (as_utc(moment) - APPLE_REFERENCE_DATE).total_seconds()


class Note(BaseModel):
    """A single note from the notes file.

    Field aliases match the camelCase keys of the on-disk JSON, so
    ``Note.model_validate(raw)`` accepts a stored object directly and
    ``model_dump(by_alias=True, mode="json")`` reproduces it.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    text: str
    is_pinned: bool = Field(default=False, alias="isPinned")
    is_locked: bool = Field(default=False, alias="isLocked")
    attributed_text_rtf: bytes | None = Field(default=None, alias="attributedTextRTF")
    last_modified: datetime | None = Field(default=None, alias="lastModified")

    @field_validator("last_modified", mode="before")
    @classmethod
    def parse_last_modified(cls, v: Any) -> Any:
        # bool is an int subclass; let pydantic reject it
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return from_apple_timestamp(float(v))
        return v

    @field_validator("last_modified")
    @classmethod
    def normalize_last_modified(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @field_validator("attributed_text_rtf", mode="before")
    @classmethod
    def decode_rtf(cls, v: Any) -> Any:
        if isinstance(v, str):
            return base64.b64decode(v)
        return v

    @field_serializer("id")
    def serialize_id(self, v: UUID) -> str:
        return str(v).upper()

    @field_serializer("last_modified")
    def serialize_last_modified(self, v: datetime | None) -> float | None:
        return to_apple_timestamp(v) if v is not None else None

    @field_serializer("attributed_text_rtf")
    def serialize_rtf(self, v: bytes | None) -> str | None:
        return base64.b64encode(v).decode("ascii") if v is not None else None

    def update_modified_date(self, now: datetime | None = None) -> None:
        """Stamp the note as modified at *now* (defaults to the current time)."""
        self.last_modified = as_utc(now) if now is not None else utc_now()
