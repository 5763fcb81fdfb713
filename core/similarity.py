"""
Cosine similarity and top-K ranking.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np


def cosine(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> Optional[float]:
    """Cosine similarity of two equal-length vectors.

    Returns None (unscorable) when either vector is missing or empty, when the
    lengths differ, or when either vector has zero norm.
    """
    if a is None or b is None or len(a) == 0 or len(a) != len(b):
        return None
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0.0 or norm_b == 0.0:
        return None
    score = float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
    if not np.isfinite(score):
        return None
    return score


def rank(items: Iterable[dict], limit: int) -> List[dict]:
    """Drop unscorable items, sort by score descending and keep the top `limit`.

    Python's sort is stable, so ties keep the order the store returned them in.
    """
    scored = [item for item in items if item.get("score") is not None]
    scored.sort(key=lambda item: item["score"], reverse=True)
    return scored[:limit]
