"""SQLModel database models for memex."""

from memex.models.embeddings import EventEmbedding, decode_vector, encode_vector
from memex.models.events import (
    CalendarEvent,
    Event,
    EventType,
    HealthEntry,
    Location,
    MoneyTransaction,
    MoodEntry,
    Note,
    Photo,
    PhotoAnalysis,
    Video,
    VoiceMemo,
)

__all__ = [
    "CalendarEvent",
    "Event",
    "EventEmbedding",
    "EventType",
    "HealthEntry",
    "Location",
    "MoneyTransaction",
    "MoodEntry",
    "Note",
    "Photo",
    "PhotoAnalysis",
    "Video",
    "VoiceMemo",
    "decode_vector",
    "encode_vector",
]
