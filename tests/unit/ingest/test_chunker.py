"""Tests for the fixed-window chunker."""

from __future__ import annotations

import math

import pytest

from notefuse.db.models import Chunk
from notefuse.errors import InvalidConfiguration
from notefuse.ingest.chunker import TextChunker, chunk_text


def test_scenario_stride_three():
    assert chunk_text("abcdefghij", chunk_size=4, overlap=1) == ["abcd", "defg", "ghij"]


def test_short_text_single_chunk():
    assert chunk_text("short", chunk_size=500, overlap=50) == ["short"]


def test_text_equal_to_chunk_size_single_chunk():
    assert chunk_text("abcd", chunk_size=4, overlap=1) == ["abcd"]


def test_empty_text_no_chunks():
    assert chunk_text("", chunk_size=4, overlap=1) == []


def test_final_partial_window_emitted():
    assert chunk_text("abcdefg", chunk_size=4, overlap=0) == ["abcd", "efg"]


def test_whitespace_preserved_verbatim():
    assert chunk_text("  ab  ", chunk_size=3, overlap=0) == ["  a", "b  "]


@pytest.mark.parametrize("length,size,overlap", [
    (10, 4, 1),
    (11, 4, 1),
    (1000, 500, 50),
    (1234, 500, 50),
    (37, 5, 0),
    (99, 10, 9),
])
def test_chunk_count_formula(length, size, overlap):
    chunks = chunk_text("x" * length, chunk_size=size, overlap=overlap)
    expected = math.ceil((length - overlap) / (size - overlap)) if length > size else 1
    assert len(chunks) == expected


@pytest.mark.parametrize("size,overlap", [(4, 1), (7, 3), (10, 0), (5, 4)])
def test_every_character_covered(size, overlap):
    text = "".join(chr(ord("a") + i % 26) for i in range(83))
    step = size - overlap
    chunks = chunk_text(text, chunk_size=size, overlap=overlap)
    covered = set()
    for i, chunk in enumerate(chunks):
        start = i * step
        assert text[start : start + len(chunk)] == chunk
        covered.update(range(start, start + len(chunk)))
    assert covered == set(range(len(text)))


def test_consecutive_chunks_share_overlap():
    chunks = chunk_text("0123456789" * 10, chunk_size=20, overlap=5)
    for prev, nxt in zip(chunks, chunks[1:]):
        assert prev[-5:] == nxt[:5]


@pytest.mark.parametrize("size,overlap", [(4, 4), (4, 5), (0, 0), (4, -1)])
def test_invalid_configuration(size, overlap):
    with pytest.raises(InvalidConfiguration):
        chunk_text("abcdefghij", chunk_size=size, overlap=overlap)


def test_invalid_configuration_is_value_error():
    with pytest.raises(ValueError):
        chunk_text("abc", chunk_size=2, overlap=2)


# ------------------------------------------------------------------
# TextChunker
# ------------------------------------------------------------------


def test_text_chunker_defaults():
    chunker = TextChunker()
    assert chunker.chunk_size == 500
    assert chunker.overlap == 50


def test_text_chunker_rejects_bad_overlap():
    with pytest.raises(InvalidConfiguration):
        TextChunker(chunk_size=50, overlap=50)


def test_text_chunker_builds_chunks():
    chunks = TextChunker(chunk_size=4, overlap=1).chunk(12, "meeting_note", "abcdefghij")
    assert all(isinstance(c, Chunk) for c in chunks)
    assert [c.text for c in chunks] == ["abcd", "defg", "ghij"]
    assert [c.sequence_index for c in chunks] == [0, 1, 2]
    assert {c.resource_id for c in chunks} == {"12"}
    assert {c.resource_type for c in chunks} == {"meeting_note"}


def test_text_chunker_blank_text():
    assert TextChunker().chunk("1", "meeting_note", "   \n ") == []
