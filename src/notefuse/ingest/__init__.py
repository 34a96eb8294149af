"""notefuse ingest pipeline: chunker, embedding client, embedding store."""

from notefuse.ingest.chunker import TextChunker, chunk_text
from notefuse.ingest.embeddings import EmbeddingClient, LiteLLMEmbeddingClient
from notefuse.ingest.store import EmbeddingStore

__all__ = [
    "EmbeddingClient",
    "EmbeddingStore",
    "LiteLLMEmbeddingClient",
    "TextChunker",
    "chunk_text",
]
