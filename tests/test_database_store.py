"""Tests for DatabaseEventStore."""

from __future__ import annotations

import numpy as np
import pytest

from memex.models import Event, MoodEntry, Note, Photo, PhotoAnalysis
from memex.store.database import DatabaseEventStore
from memex.store.protocol import EventStore, SupportsEmbeddingMaintenance


def _event(event_id: str, ts: str) -> Event:
    return Event(id=event_id, type="note", timestamp=ts, summary=event_id)


class TestProtocols:
    def test_implements_protocols(self, store: DatabaseEventStore):
        assert isinstance(store, EventStore)
        assert isinstance(store, SupportsEmbeddingMaintenance)

    def test_dialect(self, store: DatabaseEventStore):
        assert store.dialect == "sqlite"


class TestEmbeddings:
    @pytest.mark.asyncio
    async def test_upsert_and_read_back(self, store: DatabaseEventStore):
        await store.upsert_embedding("e1", [0.5, -1.0, 2.0], "m1")

        rows = await store.get_all_embeddings()

        assert len(rows) == 1
        assert rows[0].event_id == "e1"
        assert rows[0].model == "m1"
        assert rows[0].vector.dtype == np.float32
        np.testing.assert_array_equal(rows[0].vector, [0.5, -1.0, 2.0])

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, store: DatabaseEventStore):
        await store.upsert_embedding("e1", [1.0, 1.0], "old")
        await store.upsert_embedding("e1", [2.0, 2.0], "new")

        stored = await store.get_embedding("e1")

        assert stored is not None
        assert stored.model == "new"
        np.testing.assert_array_equal(stored.vector, [2.0, 2.0])
        assert await store.get_embedding_count() == 1

    @pytest.mark.asyncio
    async def test_get_missing_embedding(self, store: DatabaseEventStore):
        assert await store.get_embedding("nope") is None

    @pytest.mark.asyncio
    async def test_unembedded_newest_first(self, store: DatabaseEventStore):
        await store.add(
            _event("old", "2024-01-01T00:00:00Z"),
            _event("new", "2024-06-01T00:00:00Z"),
            _event("mid", "2024-03-01T00:00:00Z"),
        )
        await store.upsert_embedding("mid", [1.0], "m")

        assert await store.get_unembedded_event_ids() == ["new", "old"]

    @pytest.mark.asyncio
    async def test_delete(self, store: DatabaseEventStore):
        await store.upsert_embedding("a", [1.0], "m")
        await store.upsert_embedding("b", [1.0], "m")

        assert await store.delete_embedding("a") is True
        assert await store.delete_embedding("a") is False
        assert await store.get_embedding_count() == 1
        assert await store.delete_all_embeddings() == 1
        assert await store.get_embedding_count() == 0


class TestDomainLookups:
    @pytest.mark.asyncio
    async def test_event_and_records(self, store: DatabaseEventStore):
        await store.add(
            _event("e1", "2024-01-01T00:00:00Z"),
            Note(event_id="e1", content="hello"),
            MoodEntry(event_id="e1", score=3, timestamp="2024-01-01"),
        )

        event = await store.get_event("e1")
        note = await store.get_note_by_event("e1")
        mood = await store.get_mood_by_event("e1")

        assert event is not None and event.summary == "e1"
        assert note is not None and note.content == "hello"
        assert mood is not None and mood.score == 3
        assert await store.get_video_by_event("e1") is None
        assert await store.get_event("missing") is None

    @pytest.mark.asyncio
    async def test_photo_analysis(self, store: DatabaseEventStore):
        await store.add(
            _event("e1", "2024-01-01T00:00:00Z"),
            Photo(id="p1", event_id="e1", file_path="/a.jpg"),
            PhotoAnalysis(photo_id="p1", description="cat"),
        )

        photo = await store.get_photo_by_event("e1")
        assert photo is not None
        analysis = await store.get_photo_analysis_by_photo(photo.id)
        assert analysis is not None and analysis.description == "cat"
