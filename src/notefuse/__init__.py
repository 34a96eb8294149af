"""notefuse: hybrid semantic search over meeting notes and transcripts."""

from notefuse.config import SearchConfig, load_config
from notefuse.db.models import Document, SearchScope
from notefuse.rag.retriever import IndexResult, Retriever, SearchResponse

__version__ = "0.1.0"

__all__ = [
    "Document",
    "IndexResult",
    "Retriever",
    "SearchConfig",
    "SearchResponse",
    "SearchScope",
    "load_config",
]
