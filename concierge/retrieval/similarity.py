"""Vector similarity helpers."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Zero vectors, empty vectors and vectors of different lengths score 0.0
    so that ranking never has to deal with NaN.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape or vec_a.size == 0:
        return 0.0

    denominator = float(np.linalg.norm(vec_a)) * float(np.linalg.norm(vec_b))
    if denominator == 0.0:
        return 0.0
    # Clamp float drift so identical vectors stay within [-1, 1]
    return float(np.clip(np.dot(vec_a, vec_b) / denominator, -1.0, 1.0))
