"""Tests for vector blob encoding and dimension checks."""

from __future__ import annotations

import pytest

from notefuse.db.vectors import check_dimensions, decode_vector, encode_vector, vector_norm
from notefuse.errors import DimensionMismatch


def test_encode_is_four_bytes_per_float():
    assert len(encode_vector([0.5, -1.0, 2.0])) == 12


def test_decode_restores_float32_values():
    assert decode_vector(encode_vector([0.5, -1.0, 2.0])) == [0.5, -1.0, 2.0]


def test_decode_empty_blob():
    assert decode_vector(b"") == []


@pytest.mark.parametrize("vector,expected", [
    ([3.0, 4.0], 5.0),
    ([0.0, 0.0, 0.0], 0.0),
    ([-2.0], 2.0),
])
def test_vector_norm(vector, expected):
    assert vector_norm(vector) == pytest.approx(expected)


def test_check_dimensions_accepts_matching_length():
    check_dimensions([1.0, 2.0], 2)


def test_check_dimensions_none_disables_check():
    check_dimensions([1.0, 2.0, 3.0], None)


def test_check_dimensions_rejects_other_length():
    with pytest.raises(DimensionMismatch) as info:
        check_dimensions([1.0, 2.0, 3.0], 2)
    assert info.value.expected == 2
    assert info.value.actual == 3
