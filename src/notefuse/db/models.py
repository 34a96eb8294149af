"""Domain models for chunks, embedding records and documents."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of a document's text, the unit of embedding."""

    resource_id: str
    resource_type: str
    text: str
    sequence_index: int = 0


@dataclass
class EmbeddingRecord:
    """One persisted (chunk text, vector) pair with its provenance.

    Records are append-only: nothing updates a row after insert.
    """

    resource_id: str
    resource_type: str
    content: str
    vector: list[float] = field(repr=False)
    id: int | None = None  # set by the repository on insert
    created_at: str | None = None

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass
class Document:
    """A searchable document owned by the external document store."""

    resource_id: str
    resource_type: str
    title: str = ""
    body: str = ""
    summary: str | None = None
    owner_id: str | None = None
    created_at: str | None = None

    @property
    def query_text(self) -> str:
        """Text used when this document is itself the query: body, summary, title."""
        for candidate in (self.body, self.summary, self.title):
            if candidate and candidate.strip():
                return candidate
        return ""


@dataclass(frozen=True)
class SearchScope:
    """Restricts which resources a search may return.

    Attributes:
        resource_type: Only records/documents of this type (None = any type).
        resource_ids: Allow-list of resource ids (None = no restriction;
            an empty set matches nothing). Stored as a frozenset of
            strings whatever id type the caller passes.
        owner_id: Only documents owned by this id. Resolved into
            ``resource_ids`` by the retriever before searching.
    """

    resource_type: str | None = None
    resource_ids: Collection[str | int] | None = None
    owner_id: str | None = None

    def __post_init__(self) -> None:
        # Ids are opaque; a store may hand out ints where records hold TEXT.
        if self.resource_ids is not None:
            object.__setattr__(self, "resource_ids", frozenset(str(i) for i in self.resource_ids))

    def allows(self, resource_id: str, resource_type: str) -> bool:
        if self.resource_type is not None and resource_type != self.resource_type:
            return False
        if self.resource_ids is not None and str(resource_id) not in self.resource_ids:
            return False
        return True
