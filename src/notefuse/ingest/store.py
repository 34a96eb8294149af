"""Embedding store: embed chunks and persist them as embedding records.

For each chunk (or batch of chunks):
1. Embed the chunk text via the injected ``EmbeddingClient``.
2. Insert an ``EmbeddingRecord`` via ``EmbeddingRepository.insert()``.

Each insert commits on its own. If embedding fails part-way, the records
already written stay persisted and EmbeddingGenerationFailed reports how many.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from notefuse.db.models import EmbeddingRecord
from notefuse.db.repository import EmbeddingRepository
from notefuse.errors import EmbeddingGenerationFailed, InvalidConfiguration, TransientError
from notefuse.ingest.embeddings import EmbeddingClient

logger = logging.getLogger(__name__)


class EmbeddingStore:
    """Write chunk text + vectors + provenance to the embedding repository.

    Args:
        repo:   Open EmbeddingRepository.
        client: Embedding client used for every chunk.
    """

    def __init__(self, repo: EmbeddingRepository, client: EmbeddingClient) -> None:
        self._repo = repo
        self._client = client

    def save(
        self,
        resource_id: str,
        resource_type: str,
        chunks: Sequence[str],
        *,
        batch_size: int = 1,
    ) -> int:
        """Embed *chunks* and persist one record per chunk.

        Args:
            resource_id: Owning document id.
            resource_type: Owning document kind.
            chunks: Chunk texts, in document order.
            batch_size: Chunks per provider call; 1 means one call per chunk.

        Returns:
            Number of records written.

        Raises:
            EmbeddingGenerationFailed: If a provider call fails. The original
                TransientError is chained as ``__cause__``.
            InvalidConfiguration: If ``batch_size < 1``.
        """
        if batch_size < 1:
            raise InvalidConfiguration(f"batch_size must be >= 1, got {batch_size}")

        resource_id = str(resource_id)
        written = 0
        for start in range(0, len(chunks), batch_size):
            batch = list(chunks[start : start + batch_size])
            try:
                vectors = (
                    [self._client.embed(batch[0])]
                    if len(batch) == 1
                    else self._client.embed_many(batch)
                )
            except TransientError as exc:
                logger.warning(
                    "Embedding failed for %s '%s' at chunk %d: %s",
                    resource_type,
                    resource_id,
                    start,
                    exc,
                )
                raise EmbeddingGenerationFailed(resource_id, written, start) from exc

            for text, vector in zip(batch, vectors):
                self._repo.insert(
                    EmbeddingRecord(
                        resource_id=resource_id,
                        resource_type=resource_type,
                        content=text,
                        vector=vector,
                    )
                )
                written += 1

        logger.info("Stored %d embedding(s) for %s '%s'", written, resource_type, resource_id)
        return written
