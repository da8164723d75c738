"""Persisted event embeddings and the float32 blob codec."""

from __future__ import annotations

from datetime import UTC, datetime

import numpy as np
from sqlalchemy import DateTime, LargeBinary
from sqlmodel import Field, SQLModel

from memex.exceptions import StorageError

# Vectors are stored as packed little-endian float32.
_BLOB_DTYPE = np.dtype("<f4")


class EventEmbedding(SQLModel, table=True):
    """One embedding per event; overwritten on re-embedding."""

    __tablename__ = "memory_embeddings"

    event_id: str = Field(foreign_key="events.id", primary_key=True)
    embedding: bytes = Field(sa_type=LargeBinary)
    model: str = Field(default="text-embedding-3-small")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )


def encode_vector(vector: list[float] | np.ndarray) -> bytes:
    """Pack *vector* into a float32 blob."""
    return np.asarray(vector, dtype=_BLOB_DTYPE).tobytes()


def decode_vector(blob: bytes) -> np.ndarray:
    """Unpack a float32 blob into a new, writable array.

    The result owns its memory; it never aliases *blob*.
    """
    if len(blob) % _BLOB_DTYPE.itemsize:
        msg = f"Embedding blob length {len(blob)} is not a multiple of {_BLOB_DTYPE.itemsize}"
        raise StorageError(msg)
    return np.frombuffer(blob, dtype=_BLOB_DTYPE).astype(np.float32, copy=True)
