"""Retrieval facade: the only entry point callers use.

Write path:
    text → TextChunker → EmbeddingClient → EmbeddingRepository
Read path:
    query → EmbeddingClient → VectorIndex ─┐
                                           ├→ fuse() → ranked SearchResults
    query → LexicalSearch ─────────────────┘

``index()`` is append-only. Use ``reindex()`` (delete then index) when a
document's previous records must go, and ``forget()`` after the document
itself has been deleted from its store. Concurrent re-indexing of the same
resource is not serialised here.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field, replace

from notefuse.config import DEFAULT_RESOURCE_TYPE, SearchConfig
from notefuse.db.documents import DocumentStore
from notefuse.db.models import SearchScope
from notefuse.db.repository import EmbeddingRepository
from notefuse.errors import InvalidConfiguration, RecordNotFound, TransientError
from notefuse.ingest.chunker import TextChunker
from notefuse.ingest.embeddings import EmbeddingClient
from notefuse.ingest.store import EmbeddingStore
from notefuse.rag.fusion import SearchResult, fuse
from notefuse.rag.lexical import LexicalSearch
from notefuse.rag.vector_search import BruteForceIndex, VectorHit, VectorIndex, VectorSearch

logger = logging.getLogger(__name__)


@dataclass
class IndexResult:
    """Outcome of indexing one document.

    Attributes:
        resource_id: Indexed document id.
        resource_type: Indexed document kind.
        chunk_count: Chunks produced by the chunker.
        records_written: Embedding records persisted.
        records_deleted: Stale records removed first (reindex only).
    """

    resource_id: str
    resource_type: str
    chunk_count: int
    records_written: int
    records_deleted: int = 0


@dataclass
class SearchResponse:
    """Fused search results plus how they were obtained.

    ``degraded`` is True when the vector channel failed with a transient error
    and ``results`` come from lexical matching alone; ``error`` holds that
    failure. An empty, non-degraded response means nothing matched.
    """

    results: list[SearchResult] = field(default_factory=list)
    degraded: bool = False
    error: TransientError | None = None

    def __iter__(self) -> Iterator[SearchResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


class Retriever:
    """Hybrid semantic search over chunked document embeddings.

    Args:
        repo: Embedding record store.
        client: Embedding client for chunks and queries.
        documents: Document store for enrichment, lexical matching and
            ``related_to`` lookups.
        config: Search configuration (defaults if omitted). Its ``dimensions``
            must match the client's and is imposed on a repository that has
            none set.
        index: Vector scoring backend; defaults to a BruteForceIndex capped at
            ``config.candidate_cap``.
        document_types: Resource types enriched from the document store.
    """

    def __init__(
        self,
        repo: EmbeddingRepository,
        client: EmbeddingClient,
        documents: DocumentStore,
        config: SearchConfig | None = None,
        *,
        index: VectorIndex | None = None,
        document_types: Collection[str] = (DEFAULT_RESOURCE_TYPE,),
    ) -> None:
        self.config = (config or SearchConfig()).validate()
        _check_dimensions(self.config, repo, client)
        self._repo = repo
        self._documents = documents
        self._chunker = TextChunker(self.config.chunk_size, self.config.overlap)
        self._store = EmbeddingStore(repo, client)
        self._vector = VectorSearch(
            client,
            index or BruteForceIndex(repo, self.config.candidate_cap),
            documents,
            document_types=document_types,
            fetch_timeout=self.config.fetch_timeout,
            enrich_workers=self.config.enrich_workers,
        )
        self._lexical = LexicalSearch(documents, case_sensitive=self.config.case_sensitive)

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def index(
        self,
        resource_id: str,
        resource_type: str,
        text: str,
        *,
        batch_size: int = 1,
    ) -> IndexResult:
        """Chunk *text*, embed every chunk and append the records.

        Raises:
            EmbeddingGenerationFailed: If a chunk cannot be embedded; records
                for earlier chunks stay persisted.
        """
        chunks = self._chunker.chunk(resource_id, resource_type, text)
        written = self._store.save(
            resource_id,
            resource_type,
            [c.text for c in chunks],
            batch_size=batch_size,
        )
        return IndexResult(
            resource_id=str(resource_id),
            resource_type=resource_type,
            chunk_count=len(chunks),
            records_written=written,
        )

    def reindex(
        self,
        resource_id: str,
        resource_type: str,
        text: str,
        *,
        batch_size: int = 1,
    ) -> IndexResult:
        """Delete the resource's existing records, then index *text*."""
        deleted = self._repo.delete_by_resource(resource_id, resource_type)
        result = self.index(resource_id, resource_type, text, batch_size=batch_size)
        return replace(result, records_deleted=deleted)

    def forget(self, resource_id: str, resource_type: str) -> int:
        """Delete all embedding records of a resource. Returns the count."""
        deleted = self._repo.delete_by_resource(resource_id, resource_type)
        logger.info("Deleted %d embedding(s) for %s '%s'", deleted, resource_type, resource_id)
        return deleted

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        limit: int | None = None,
        scope: SearchScope | None = None,
    ) -> SearchResponse:
        """Hybrid search: vector + lexical channels fused into one ranking.

        Each channel fetches ``limit * channel_multiplier`` candidates. If the
        vector channel fails with a TransientError the response is degraded
        (lexical results only, ``degraded=True``). Lexical failures and
        non-transient errors propagate.
        """
        limit = self._check_limit(limit)
        if not query.strip():
            return SearchResponse()
        scope = self._resolve_scope(scope)
        if scope.resource_ids is not None and not scope.resource_ids:
            return SearchResponse()

        channel_limit = limit * self.config.channel_multiplier
        error: TransientError | None = None
        try:
            vector_hits = self._vector.search(query, channel_limit, scope)
        except TransientError as exc:
            logger.warning("Vector search unavailable, using lexical results only: %s", exc)
            vector_hits, error = [], exc

        lexical_docs = self._lexical.search(query, channel_limit, scope)
        results = fuse(
            vector_hits,
            lexical_docs,
            limit,
            vector_weight=self.config.vector_weight,
            lexical_weight=self.config.lexical_weight,
        )
        logger.debug(
            "Search %r: %d vector hit(s), %d lexical match(es), %d result(s)",
            query,
            len(vector_hits),
            len(lexical_docs),
            len(results),
        )
        return SearchResponse(results=results, degraded=error is not None, error=error)

    def related_to(
        self,
        resource_id: str,
        resource_type: str = DEFAULT_RESOURCE_TYPE,
        limit: int = 5,
        scope: SearchScope | None = None,
    ) -> list[VectorHit]:
        """Vector hits similar to a document, excluding the document itself.

        The document's body (falling back to summary, then title) is the query.

        Raises:
            RecordNotFound: If the document does not exist.
            InvalidConfiguration: If the document has no text to query with.
        """
        limit = self._check_limit(limit)
        document = self._documents.get(resource_id, resource_type)
        if document is None:
            raise RecordNotFound(str(resource_id), resource_type)
        text = document.query_text
        if not text:
            raise InvalidConfiguration(
                f"{resource_type} '{resource_id}' has no body, summary or title to search with"
            )

        # Over-fetch by the document's own record count so self-matches
        # cannot crowd other documents out of the result.
        own = self._repo.count_by_resource(resource_id, resource_type)
        hits = self._vector.search(text, limit + own, self._resolve_scope(scope))
        return [
            hit
            for hit in hits
            if not (hit.resource_id == str(resource_id) and hit.resource_type == resource_type)
        ][:limit]

    def context(
        self,
        query: str,
        limit: int = 3,
        scope: SearchScope | None = None,
    ) -> list[VectorHit]:
        """Best-matching chunk per distinct enriched document, for prompt context.

        Hits whose document no longer exists are dropped.
        """
        limit = self._check_limit(limit)
        if not query.strip():
            return []
        scope = self._resolve_scope(scope)
        hits = self._vector.search(query, limit * self.config.channel_multiplier, scope)

        best: dict[tuple[str, str], VectorHit] = {}
        for hit in hits:
            if hit.document is None:
                continue
            best.setdefault((hit.resource_id, hit.resource_type), hit)
        return list(best.values())[:limit]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.default_limit
        if limit < 1:
            raise InvalidConfiguration(f"limit must be >= 1, got {limit}")
        return limit

    def _resolve_scope(self, scope: SearchScope | None) -> SearchScope:
        """Turn an owner restriction into an explicit resource-id allow-list."""
        if scope is None:
            return SearchScope()
        if scope.owner_id is None:
            return scope
        owned = {
            str(doc.resource_id)
            for doc in self._documents.scan(
                resource_type=scope.resource_type, owner_id=scope.owner_id
            )
        }
        if scope.resource_ids is not None:
            owned &= scope.resource_ids
        return replace(scope, resource_ids=frozenset(owned))


def _check_dimensions(
    config: SearchConfig, repo: EmbeddingRepository, client: EmbeddingClient
) -> None:
    """Make the client, the repository and the config agree on vector length.

    Raises:
        InvalidConfiguration: If the client or repository uses another dimension.
    """
    if client.dimensions != config.dimensions:
        raise InvalidConfiguration(
            f"Embedding client produces {client.dimensions}-dimensional vectors; "
            f"config expects {config.dimensions}"
        )
    if repo.dimensions is None:
        repo.dimensions = config.dimensions
    elif repo.dimensions != config.dimensions:
        raise InvalidConfiguration(
            f"Repository stores {repo.dimensions}-dimensional vectors; "
            f"config expects {config.dimensions}"
        )
