"""Document store boundary.

The retriever only depends on the ``DocumentStore`` protocol: ``get`` for
result enrichment and ``scan`` for lexical matching and owner scoping.
``SqliteDocumentStore`` is a reference adapter backed by the ``documents``
table; applications normally plug in their own store.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import closing
from typing import Protocol, runtime_checkable

from notefuse.db.connection import Database
from notefuse.db.models import Document

_DOCUMENT_COLUMNS = "resource_id, resource_type, title, body, summary, owner_id, created_at"


@runtime_checkable
class DocumentStore(Protocol):
    """Read-only view of the documents that embedding records point at."""

    def get(self, resource_id: str, resource_type: str) -> Document | None:
        """Return the document, or None if it does not exist."""
        ...

    def scan(
        self, resource_type: str | None = None, owner_id: str | None = None
    ) -> Iterator[Document]:
        """Yield documents in the store's natural order."""
        ...


class SqliteDocumentStore:
    """DocumentStore over the ``documents`` table.

    Opens a short-lived connection per call, so one instance can serve the
    parallel enrichment workers without sharing a connection across threads.

    Args:
        db: Database to open connections from.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def add(self, document: Document) -> None:
        """Insert or replace *document* (keyed by resource type + id)."""
        with closing(self._db.connect()) as conn:
            conn.execute(
                """
                INSERT INTO documents (resource_id, resource_type, title, body, summary, owner_id)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(resource_type, resource_id) DO UPDATE SET
                    title = excluded.title,
                    body = excluded.body,
                    summary = excluded.summary,
                    owner_id = excluded.owner_id
                """,
                (
                    str(document.resource_id),
                    document.resource_type,
                    document.title,
                    document.body,
                    document.summary,
                    document.owner_id,
                ),
            )
            conn.commit()

    def get(self, resource_id: str, resource_type: str) -> Document | None:
        with closing(self._db.connect()) as conn:
            row = conn.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE resource_id = ? AND resource_type = ?",
                (str(resource_id), resource_type),
            ).fetchone()
        return _row_to_document(row) if row else None

    def scan(
        self, resource_type: str | None = None, owner_id: str | None = None
    ) -> Iterator[Document]:
        clauses: list[str] = []
        params: list[str] = []
        if resource_type is not None:
            clauses.append("resource_type = ?")
            params.append(resource_type)
        if owner_id is not None:
            clauses.append("owner_id = ?")
            params.append(str(owner_id))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with closing(self._db.connect()) as conn:
            rows = conn.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents{where} ORDER BY rowid", params
            ).fetchall()
        for row in rows:
            yield _row_to_document(row)

    def delete(self, resource_id: str, resource_type: str) -> bool:
        """Delete one document. Embedding records are left to the caller.

        Returns:
            True if a row was deleted.
        """
        with closing(self._db.connect()) as conn:
            cur = conn.execute(
                "DELETE FROM documents WHERE resource_id = ? AND resource_type = ?",
                (str(resource_id), resource_type),
            )
            conn.commit()
        return cur.rowcount > 0


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        resource_id=row["resource_id"],
        resource_type=row["resource_type"],
        title=row["title"],
        body=row["body"],
        summary=row["summary"],
        owner_id=row["owner_id"],
        created_at=row["created_at"],
    )
