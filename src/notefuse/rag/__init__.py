"""notefuse retrieval: vector search, lexical search, rank fusion, facade."""

from notefuse.rag.fusion import SearchResult, fuse
from notefuse.rag.lexical import LexicalSearch
from notefuse.rag.retriever import IndexResult, Retriever, SearchResponse
from notefuse.rag.similarity import cosine_similarity
from notefuse.rag.vector_search import (
    BruteForceIndex,
    SqliteVecIndex,
    VectorHit,
    VectorIndex,
    VectorSearch,
)

__all__ = [
    "BruteForceIndex",
    "IndexResult",
    "LexicalSearch",
    "Retriever",
    "SearchResponse",
    "SearchResult",
    "SqliteVecIndex",
    "VectorHit",
    "VectorIndex",
    "VectorSearch",
    "cosine_similarity",
    "fuse",
]
