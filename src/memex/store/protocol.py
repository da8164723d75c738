"""EventStore protocol: the persistent-store surface the index reads and writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from memex.models import (
        CalendarEvent,
        Event,
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
    from memex.search.types import StoredEmbedding


@runtime_checkable
class EventStore(Protocol):
    """Read access to events and their domain records, plus embedding persistence.

    Every method is its own unit of work: writes are durable when the
    call returns.
    """

    # ------------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------------

    async def get_all_embeddings(self) -> list[StoredEmbedding]:
        """Return every persisted embedding."""
        ...

    async def upsert_embedding(self, event_id: str, vector: Sequence[float], model: str) -> None:
        """Insert or overwrite the embedding for *event_id*."""
        ...

    async def get_unembedded_event_ids(self) -> list[str]:
        """Return ids of events with no embedding, newest first."""
        ...

    # ------------------------------------------------------------------
    # Events and domain records
    # ------------------------------------------------------------------

    async def get_event(self, event_id: str) -> Event | None: ...

    async def get_transaction_by_event(self, event_id: str) -> MoneyTransaction | None: ...

    async def get_note_by_event(self, event_id: str) -> Note | None: ...

    async def get_voice_memo_by_event(self, event_id: str) -> VoiceMemo | None: ...

    async def get_calendar_event_by_event(self, event_id: str) -> CalendarEvent | None: ...

    async def get_location_by_event(self, event_id: str) -> Location | None: ...

    async def get_mood_by_event(self, event_id: str) -> MoodEntry | None: ...

    async def get_health_entry_by_event(self, event_id: str) -> HealthEntry | None: ...

    async def get_photo_by_event(self, event_id: str) -> Photo | None: ...

    async def get_photo_analysis_by_photo(self, photo_id: str) -> PhotoAnalysis | None: ...

    async def get_video_by_event(self, event_id: str) -> Video | None: ...


@runtime_checkable
class SupportsEmbeddingMaintenance(Protocol):
    """Opt-in: counting and deleting persisted embeddings."""

    async def get_embedding_count(self) -> int: ...

    async def delete_embedding(self, event_id: str) -> bool: ...

    async def delete_all_embeddings(self) -> int: ...
