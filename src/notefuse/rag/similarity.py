"""Cosine similarity between embedding vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence

from notefuse.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of *a* and *b* divided by the product of their L2 norms.

    Returns 0.0 when either vector is all zeros. The result is clamped to
    [-1, 1] to absorb floating-point drift.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return max(-1.0, min(1.0, dot / (math.sqrt(norm_a) * math.sqrt(norm_b))))
