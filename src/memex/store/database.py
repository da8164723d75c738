"""DatabaseEventStore: async SQL access to events, domain records and embeddings."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from memex.models import (
    CalendarEvent,
    Event,
    EventEmbedding,
    HealthEntry,
    Location,
    MoneyTransaction,
    MoodEntry,
    Note,
    Photo,
    PhotoAnalysis,
    Video,
    VoiceMemo,
    decode_vector,
    encode_vector,
)
from memex.search.types import StoredEmbedding

from .dialect import get_dialect, upsert

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class DatabaseEventStore:
    """Event store backed by an async SQLAlchemy engine.

    Each public method opens its own session and commits before
    returning, so a write is durable as soon as the call completes.
    Implements ``EventStore`` and ``SupportsEmbeddingMaintenance``.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._dialect = get_dialect(engine)
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def dialect(self) -> str:
        return self._dialect

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_tables(self) -> None:
        """Create all memex tables that do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, *records: SQLModel) -> None:
        """Insert *records* (events, domain records) in one transaction."""
        async with self._session_factory() as session:
            session.add_all(records)
            await session.commit()

    async def upsert_embedding(self, event_id: str, vector: Sequence[float], model: str) -> None:
        values: dict[str, Any] = {
            "event_id": event_id,
            "embedding": encode_vector(list(vector)),
            "model": model,
            "created_at": datetime.now(UTC),
        }
        async with self._session_factory() as session:
            await upsert(session, self._dialect, EventEmbedding, values, ["event_id"])
            await session.commit()

    async def delete_embedding(self, event_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                sa_delete(EventEmbedding).where(
                    EventEmbedding.event_id == event_id,  # type: ignore[arg-type]
                )
            )
            await session.commit()
        return bool(result.rowcount)

    async def delete_all_embeddings(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(sa_delete(EventEmbedding))
            await session.commit()
        logger.info("Deleted %d embeddings", result.rowcount)
        return result.rowcount  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Embedding reads
    # ------------------------------------------------------------------

    async def get_all_embeddings(self) -> list[StoredEmbedding]:
        async with self._session_factory() as session:
            result = await session.execute(select(EventEmbedding))
            rows = result.scalars().all()
        return [
            StoredEmbedding(
                event_id=row.event_id,
                vector=decode_vector(row.embedding),
                model=row.model,
            )
            for row in rows
        ]

    async def get_embedding(self, event_id: str) -> StoredEmbedding | None:
        row = await self._first(
            select(EventEmbedding).where(EventEmbedding.event_id == event_id)  # type: ignore[arg-type]
        )
        if row is None:
            return None
        return StoredEmbedding(
            event_id=row.event_id,
            vector=decode_vector(row.embedding),
            model=row.model,
        )

    async def get_embedding_count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(EventEmbedding)
            )
            return int(result.scalar_one())

    async def get_unembedded_event_ids(self) -> list[str]:
        stmt = (
            select(Event.id)
            .outerjoin(EventEmbedding, Event.id == EventEmbedding.event_id)  # type: ignore[arg-type]
            .where(EventEmbedding.event_id.is_(None))  # type: ignore[union-attr]
            .order_by(Event.timestamp.desc())  # type: ignore[attr-defined]
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Event + domain record reads
    # ------------------------------------------------------------------

    async def get_event(self, event_id: str) -> Event | None:
        async with self._session_factory() as session:
            return await session.get(Event, event_id)

    async def get_transaction_by_event(self, event_id: str) -> MoneyTransaction | None:
        return await self._by_event(MoneyTransaction, event_id)

    async def get_note_by_event(self, event_id: str) -> Note | None:
        return await self._by_event(Note, event_id)

    async def get_voice_memo_by_event(self, event_id: str) -> VoiceMemo | None:
        return await self._by_event(VoiceMemo, event_id)

    async def get_calendar_event_by_event(self, event_id: str) -> CalendarEvent | None:
        return await self._by_event(CalendarEvent, event_id)

    async def get_location_by_event(self, event_id: str) -> Location | None:
        return await self._by_event(Location, event_id)

    async def get_mood_by_event(self, event_id: str) -> MoodEntry | None:
        return await self._by_event(MoodEntry, event_id)

    async def get_health_entry_by_event(self, event_id: str) -> HealthEntry | None:
        return await self._by_event(HealthEntry, event_id)

    async def get_photo_by_event(self, event_id: str) -> Photo | None:
        return await self._by_event(Photo, event_id)

    async def get_photo_analysis_by_photo(self, photo_id: str) -> PhotoAnalysis | None:
        return await self._first(
            select(PhotoAnalysis)
            .where(PhotoAnalysis.photo_id == photo_id)  # type: ignore[arg-type]
            .order_by(PhotoAnalysis.analyzed_at.desc())  # type: ignore[attr-defined]
        )

    async def get_video_by_event(self, event_id: str) -> Video | None:
        return await self._by_event(Video, event_id)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _by_event(self, model: type[Any], event_id: str) -> Any:
        return await self._first(select(model).where(model.event_id == event_id))

    async def _first(self, stmt: Any) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalars().first()
