"""Cosine similarity and linear-scan ranking over cached vectors."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from memex.search.types import SearchHit

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``, or 0.0 if either norm is zero.

    The result is clipped to ``[-1, 1]`` to absorb rounding error.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        msg = f"Vector shapes differ: {va.shape} vs {vb.shape}"
        raise ValueError(msg)
    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))


def rank(
    query: Sequence[float] | np.ndarray,
    entries: Mapping[str, np.ndarray],
    limit: int,
) -> list[SearchHit]:
    """Score every entry against *query* and return the top *limit* hits.

    Hits are sorted by descending score.  Equal scores keep the mapping's
    iteration order, which follows the order vectors were loaded from the
    store and is not stable across process restarts.
    """
    if limit < 0:
        msg = f"limit must be non-negative, got {limit}"
        raise ValueError(msg)
    if not entries or limit == 0:
        return []

    q = np.asarray(query, dtype=np.float64)
    ids = list(entries)
    matrix = np.stack([entries[i] for i in ids]).astype(np.float64)
    if matrix.shape[1] != q.shape[0]:
        msg = f"Query has {q.shape[0]} dimensions, cached vectors have {matrix.shape[1]}"
        raise ValueError(msg)

    denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    scores = np.zeros(len(ids), dtype=np.float64)
    nonzero = denom != 0.0
    scores[nonzero] = dots[nonzero] / denom[nonzero]
    np.clip(scores, -1.0, 1.0, out=scores)

    order = np.argsort(-scores, kind="stable")[:limit]
    return [SearchHit(event_id=ids[i], score=float(scores[i])) for i in order]
