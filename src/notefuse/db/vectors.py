"""Vector encoding for the embeddings table.

Vectors are stored as native-endian float32 blobs, the format sqlite-vec's
scalar functions (``vec_distance_cosine`` and friends) read directly.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence

import sqlite_vec

from notefuse.errors import DimensionMismatch


def encode_vector(vector: Sequence[float]) -> bytes:
    """Pack *vector* into a float32 blob."""
    return sqlite_vec.serialize_float32(list(vector))


def decode_vector(blob: bytes) -> list[float]:
    """Unpack a float32 blob produced by encode_vector()."""
    count = len(blob) // 4
    return list(struct.unpack(f"{count}f", blob))


def vector_norm(vector: Sequence[float]) -> float:
    """L2 norm of *vector*."""
    return math.sqrt(sum(x * x for x in vector))


def check_dimensions(vector: Sequence[float], expected: int | None) -> None:
    """Raise DimensionMismatch unless *vector* has *expected* entries.

    ``expected=None`` disables the check.
    """
    if expected is not None and len(vector) != expected:
        raise DimensionMismatch(expected, len(vector))
