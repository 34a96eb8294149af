"""Dense retrieval: embed the query, score stored records, enrich the hits.

The scoring backend sits behind ``VectorIndex`` so a real nearest-neighbour
index can replace the exhaustive scans without touching callers:

- ``BruteForceIndex`` loads up to ``candidate_cap`` records (oldest first) and
  scores them in Python. Records beyond the cap are never considered.
- ``SqliteVecIndex`` runs the same exhaustive cosine scan inside SQLite via
  sqlite-vec, over every record.

Both skip records whose dimension differs from the query vector.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Protocol

from notefuse.config import DEFAULT_RESOURCE_TYPE
from notefuse.db.documents import DocumentStore
from notefuse.db.models import Document, EmbeddingRecord, SearchScope
from notefuse.db.repository import EmbeddingRepository
from notefuse.db.vectors import vector_norm
from notefuse.errors import RecordNotFound, Timeout
from notefuse.ingest.embeddings import EmbeddingClient
from notefuse.rag.similarity import cosine_similarity

logger = logging.getLogger(__name__)


@dataclass
class VectorHit:
    """One scored chunk, optionally enriched with its owning document.

    Attributes:
        record: The matching embedding record.
        similarity: Cosine similarity to the query vector.
        document: Owning document, or None if it is not a known document kind
            or no longer exists.
    """

    record: EmbeddingRecord
    similarity: float
    document: Document | None = None

    @property
    def resource_id(self) -> str:
        return self.record.resource_id

    @property
    def resource_type(self) -> str:
        return self.record.resource_type


# ------------------------------------------------------------------
# Index backends
# ------------------------------------------------------------------


class VectorIndex(Protocol):
    """Returns the records most similar to a query vector, best-first."""

    def nearest(
        self, vector: list[float], limit: int, scope: SearchScope | None = None
    ) -> list[tuple[EmbeddingRecord, float]]:
        ...


class BruteForceIndex:
    """Capped exhaustive scan: load a bounded working set, score every record."""

    def __init__(self, repo: EmbeddingRepository, candidate_cap: int = 1000) -> None:
        self._repo = repo
        self.candidate_cap = candidate_cap

    def nearest(
        self, vector: list[float], limit: int, scope: SearchScope | None = None
    ) -> list[tuple[EmbeddingRecord, float]]:
        scope = scope or SearchScope()
        candidates = self._repo.list_all(
            self.candidate_cap,
            resource_type=scope.resource_type,
            resource_ids=scope.resource_ids,
            dimensions=len(vector),
        )
        scored = [(record, cosine_similarity(vector, record.vector)) for record in candidates]
        # list.sort is stable with reverse=True, so ties keep retrieval order
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:limit]


class SqliteVecIndex:
    """Uncapped exhaustive scan evaluated in SQLite by sqlite-vec."""

    def __init__(self, repo: EmbeddingRepository) -> None:
        self._repo = repo

    def nearest(
        self, vector: list[float], limit: int, scope: SearchScope | None = None
    ) -> list[tuple[EmbeddingRecord, float]]:
        scope = scope or SearchScope()
        if vector_norm(vector) == 0.0:
            records = self._repo.list_all(
                limit,
                resource_type=scope.resource_type,
                resource_ids=scope.resource_ids,
                dimensions=len(vector),
            )
            return [(record, 0.0) for record in records]
        return self._repo.nearest_by_cosine(
            vector,
            limit,
            resource_type=scope.resource_type,
            resource_ids=scope.resource_ids,
        )


# ------------------------------------------------------------------
# Search
# ------------------------------------------------------------------


class VectorSearch:
    """Embed a query, rank records through a VectorIndex, attach documents.

    Args:
        client: Embedding client used for the query.
        index: Scoring backend.
        documents: Store used to enrich hits; None disables enrichment.
        document_types: Resource types that are enriched.
        fetch_timeout: Seconds to wait for all document fetches of one search.
        enrich_workers: Parallel document fetches.
    """

    def __init__(
        self,
        client: EmbeddingClient,
        index: VectorIndex,
        documents: DocumentStore | None = None,
        *,
        document_types: Collection[str] = (DEFAULT_RESOURCE_TYPE,),
        fetch_timeout: float = 10.0,
        enrich_workers: int = 8,
    ) -> None:
        self._client = client
        self._index = index
        self._documents = documents
        self.document_types = frozenset(document_types)
        self.fetch_timeout = fetch_timeout
        self.enrich_workers = enrich_workers

    def search(
        self, query_text: str, limit: int, scope: SearchScope | None = None
    ) -> list[VectorHit]:
        """Return up to *limit* hits sorted by descending similarity.

        Raises:
            EmbeddingProviderError: If the query cannot be embedded.
            Timeout: If embedding or enrichment exceeds its timeout.
        """
        if limit < 1:
            return []
        query_vector = self._client.embed(query_text)
        return self.search_vector(query_vector, limit, scope)

    def search_vector(
        self, vector: list[float], limit: int, scope: SearchScope | None = None
    ) -> list[VectorHit]:
        """Like search(), for a vector that is already embedded."""
        if limit < 1:
            return []
        hits = [
            VectorHit(record=record, similarity=similarity)
            for record, similarity in self._index.nearest(vector, limit, scope)
        ]
        self._enrich(hits)
        return hits

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    def _enrich(self, hits: list[VectorHit]) -> None:
        """Attach owning documents in place, one fetch per distinct resource."""
        if self._documents is None:
            return
        keys = list(
            dict.fromkeys(
                (hit.resource_id, hit.resource_type)
                for hit in hits
                if hit.resource_type in self.document_types
            )
        )
        if not keys:
            return

        executor = ThreadPoolExecutor(
            max_workers=min(self.enrich_workers, len(keys)),
            thread_name_prefix="notefuse-enrich",
        )
        try:
            futures = {key: executor.submit(self._fetch, *key) for key in keys}
            _, pending = wait(futures.values(), timeout=self.fetch_timeout)
            if pending:
                raise Timeout(
                    f"{len(pending)} document fetch(es) exceeded {self.fetch_timeout}s"
                )
            found = {key: future.result() for key, future in futures.items()}
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for hit in hits:
            hit.document = found.get((hit.resource_id, hit.resource_type))

    def _fetch(self, resource_id: str, resource_type: str) -> Document | None:
        try:
            document = self._documents.get(resource_id, resource_type)
        except RecordNotFound:
            document = None
        if document is None:
            logger.info(
                "Embedding records point at missing %s '%s'", resource_type, resource_id
            )
        return document
