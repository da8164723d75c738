"""Event and domain-record models.

Every domain record links to exactly one :class:`Event` through
``event_id``; each event has at most one record of its own type.
Timestamps on events are ISO 8601 strings as written by the importers.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class EventType(str, Enum):
    """Closed set of event variants."""

    TRANSACTION = "money_transaction"
    NOTE = "note"
    VOICE_MEMO = "voice_memo"
    CALENDAR_EVENT = "calendar_event"
    LOCATION = "location"
    MOOD = "mood"
    HEALTH = "health_entry"
    PHOTO = "photo"
    VIDEO = "video"
    AI_DIGEST = "ai_digest"
    SUBSCRIPTION = "subscription"


class Event(SQLModel, table=True):
    """Canonical life-record row that domain records hang off."""

    __tablename__ = "events"

    id: str = Field(default_factory=_new_id, primary_key=True)
    type: str = Field(index=True)
    timestamp: str = Field(index=True)
    summary: str = Field(default="")
    details_json: str = Field(default="{}")
    confidence: float = Field(default=1.0)
    classification: str = Field(default="local_private")
    content_hash: str | None = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))


class MoneyTransaction(SQLModel, table=True):
    __tablename__ = "money_transactions"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    date: str
    merchant: str
    amount: float
    currency: str = Field(default="USD")
    category: str | None = Field(default=None)
    account: str | None = Field(default=None)
    source: str = Field(default="csv_import")


class Note(SQLModel, table=True):
    __tablename__ = "notes"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    content: str
    source: str = Field(default="manual")
    tags: str = Field(default="[]")
    created_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))


class VoiceMemo(SQLModel, table=True):
    __tablename__ = "voice_memos"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    transcript: str = Field(default="")
    duration_seconds: float = Field(default=0.0)
    file_path: str = Field(default="")
    source: str = Field(default="telegram")
    created_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))


class CalendarEvent(SQLModel, table=True):
    __tablename__ = "calendar_events"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    title: str
    start_time: str
    end_time: str
    location: str = Field(default="")
    description: str = Field(default="")


class Location(SQLModel, table=True):
    __tablename__ = "locations"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    lat: float
    lng: float
    address: str = Field(default="")
    timestamp: str
    source: str = Field(default="google_takeout")


class MoodEntry(SQLModel, table=True):
    __tablename__ = "mood_entries"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    score: int
    note: str = Field(default="")
    timestamp: str


class HealthEntry(SQLModel, table=True):
    __tablename__ = "health_entries"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    metric_type: str
    value: float
    unit: str
    timestamp: str
    source: str = Field(default="apple_health")


class Photo(SQLModel, table=True):
    __tablename__ = "photos"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    file_path: str
    caption: str = Field(default="")
    source: str = Field(default="telegram")
    created_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))


class PhotoAnalysis(SQLModel, table=True):
    """Vision-model output for one photo.

    ``tags`` and ``mood_indicators`` hold raw JSON text as written by the
    vision integration; decoding is the reader's job.
    """

    __tablename__ = "photo_analyses"

    id: str = Field(default_factory=_new_id, primary_key=True)
    photo_id: str = Field(foreign_key="photos.id", index=True)
    description: str = Field(default="")
    tags: str = Field(default="[]")
    detected_text: str = Field(default="")
    mood_indicators: str = Field(default="{}")
    people_count: int = Field(default=0)
    model: str = Field(default="")
    analyzed_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))


class Video(SQLModel, table=True):
    __tablename__ = "videos"

    id: str = Field(default_factory=_new_id, primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    file_path: str
    duration_seconds: float = Field(default=0.0)
    frame_count: int = Field(default=0)
    summary: str = Field(default="")
    source: str = Field(default="import")
    created_at: datetime = Field(default_factory=_now, sa_type=DateTime(timezone=True))
