"""Shared pytest fixtures."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence

import pytest

from notefuse.db.connection import Database
from notefuse.db.models import Document
from notefuse.db.repository import EmbeddingRepository
from notefuse.errors import EmbeddingProviderError

FAKE_DIMS = 512


class FakeEmbeddingClient:
    """Deterministic bag-of-words embedder.

    Each distinct lower-cased word gets its own dimension in order of first
    appearance; a text's vector counts its words. Texts sharing no words are
    orthogonal.

    ``vectors`` pins exact vectors for given texts. ``fail_after`` makes the
    client raise EmbeddingProviderError once that many calls have succeeded.
    """

    def __init__(self, dimensions: int = FAKE_DIMS) -> None:
        self.dimensions = dimensions
        self.vectors: dict[str, list[float]] = {}
        self.fail_after: int | None = None
        self.calls: list[list[str]] = []
        self._vocab: dict[str, int] = {}

    def _vector(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        vec = [0.0] * self.dimensions
        for word in re.findall(r"\w+", text.lower()):
            slot = self._vocab.setdefault(word, len(self._vocab))
            vec[slot % self.dimensions] += 1.0
        return vec

    def embed(self, text: str) -> list[float]:
        return self.embed_many([text])[0]

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        if self.fail_after is not None and len(self.calls) >= self.fail_after:
            raise EmbeddingProviderError("provider unavailable")
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]


class InMemoryDocumentStore:
    """DocumentStore keeping documents in insertion order."""

    def __init__(self) -> None:
        self._docs: dict[tuple[str, str], Document] = {}

    def add(self, document: Document) -> Document:
        self._docs[(str(document.resource_id), document.resource_type)] = document
        return document

    def delete(self, resource_id: str, resource_type: str) -> bool:
        return self._docs.pop((str(resource_id), resource_type), None) is not None

    def get(self, resource_id: str, resource_type: str) -> Document | None:
        return self._docs.get((str(resource_id), resource_type))

    def scan(
        self, resource_type: str | None = None, owner_id: str | None = None
    ) -> Iterator[Document]:
        for doc in list(self._docs.values()):
            if resource_type is not None and doc.resource_type != resource_type:
                continue
            if owner_id is not None and doc.owner_id != owner_id:
                continue
            yield doc


@pytest.fixture
def database(tmp_path):
    """File-backed Database; the first connect() creates the schema."""
    db = Database(tmp_path / "notefuse.db")
    db.connect().close()
    return db


@pytest.fixture
def tmp_db(database):
    """Open connection to the initialized database, closed after the test."""
    conn = database.connect()
    yield conn
    conn.close()


@pytest.fixture
def repo(tmp_db):
    return EmbeddingRepository(tmp_db)


@pytest.fixture
def fake_client():
    return FakeEmbeddingClient()


@pytest.fixture
def documents():
    return InMemoryDocumentStore()
