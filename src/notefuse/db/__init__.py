"""notefuse database layer."""

from notefuse.db.connection import Database
from notefuse.db.documents import DocumentStore, SqliteDocumentStore
from notefuse.db.migrations import MIGRATIONS, run_migrations
from notefuse.db.models import Chunk, Document, EmbeddingRecord, SearchScope
from notefuse.db.repository import EmbeddingRepository
from notefuse.db.schema import initialize

__all__ = [
    "Chunk",
    "Database",
    "Document",
    "DocumentStore",
    "EmbeddingRecord",
    "EmbeddingRepository",
    "MIGRATIONS",
    "SearchScope",
    "SqliteDocumentStore",
    "initialize",
    "run_migrations",
]
