"""Search layer data types: value objects for embeddings, hits and rebuild results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


# ------------------------------------------------------------------
# Vector data
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StoredEmbedding:
    """An embedding row as read back from the store.

    Attributes:
        event_id: Owning event.
        vector: Embedding vector (float32).
        model: Identifier of the model that produced the vector.
    """

    event_id: str
    vector: np.ndarray
    model: str


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SearchHit:
    """A single nearest-neighbour match.

    Attributes:
        event_id: Matched event.
        score: Cosine similarity in ``[-1, 1]`` (higher is more similar).
    """

    event_id: str
    score: float


@dataclass(frozen=True, slots=True)
class RebuildResult:
    """Outcome of a rebuild run.

    Attributes:
        total: Events initially found without an embedding.
        embedded: Events embedded and persisted during this run.
        errors: Events whose batch failed at the provider.
    """

    total: int
    embedded: int
    errors: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "embedded": self.embedded, "errors": self.errors}


# ------------------------------------------------------------------
# Photo analysis payloads
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PhotoTags:
    """Decoded ``tags`` column of a photo analysis.

    ``parsed`` is False when the raw JSON was not a list of strings; such
    a value contributes no text.
    """

    tags: tuple[str, ...] = ()
    parsed: bool = True

    @classmethod
    def unparsable(cls) -> PhotoTags:
        return cls(tags=(), parsed=False)

