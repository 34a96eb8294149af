"""Embedding record store: the persistence this package owns.

Records are append-only. Re-indexing a resource without calling
delete_by_resource() first leaves the old records in place next to the new ones.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Collection

from notefuse.db.models import EmbeddingRecord
from notefuse.db.vectors import (
    check_dimensions,
    decode_vector,
    encode_vector,
    vector_norm,
)

_RECORD_COLUMNS = "id, resource_id, resource_type, content, vector, created_at"


class EmbeddingRepository:
    """Data access layer for embedding records.

    Wraps an open sqlite3.Connection; the connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection, dimensions: int | None = None) -> None:
        """Initialise with an open database connection.

        Args:
            conn: A connection from Database.connect() (sqlite-vec loaded,
                schema current).
            dimensions: Required vector length for every insert, or None to
                accept any length.
        """
        self._conn = conn
        self.dimensions = dimensions

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: EmbeddingRecord) -> int:
        """Persist *record* and return its new id.

        The record's ``id`` and ``created_at`` are filled in on the instance.

        Raises:
            DimensionMismatch: If the vector length differs from ``dimensions``.
        """
        check_dimensions(record.vector, self.dimensions)
        cur = self._conn.execute(
            """
            INSERT INTO embeddings (resource_id, resource_type, content, vector, dimensions, norm)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                str(record.resource_id),
                record.resource_type,
                record.content,
                encode_vector(record.vector),
                len(record.vector),
                vector_norm(record.vector),
            ),
        )
        self._conn.commit()
        record.id = cur.lastrowid
        record.created_at = self._conn.execute(
            "SELECT created_at FROM embeddings WHERE id = ?", (record.id,)
        ).fetchone()[0]
        return record.id

    def delete_by_resource(self, resource_id: str, resource_type: str) -> int:
        """Delete every record of one resource. Returns the number deleted."""
        cur = self._conn.execute(
            "DELETE FROM embeddings WHERE resource_id = ? AND resource_type = ?",
            (str(resource_id), resource_type),
        )
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, record_id: int) -> EmbeddingRecord | None:
        """Return a record by id, or None if not found."""
        row = self._conn.execute(
            f"SELECT {_RECORD_COLUMNS} FROM embeddings WHERE id = ?", (record_id,)
        ).fetchone()
        return _row_to_record(row) if row else None

    def list_all(
        self,
        limit: int,
        *,
        resource_type: str | None = None,
        resource_ids: Collection[str] | None = None,
        dimensions: int | None = None,
    ) -> list[EmbeddingRecord]:
        """Return up to *limit* records in insertion order (oldest first).

        Args:
            limit: Maximum number of records returned.
            resource_type: Only records of this type.
            resource_ids: Only records of these resources; empty matches nothing.
            dimensions: Only records whose vectors have this length.
        """
        if resource_ids is not None and not resource_ids:
            return []
        where, params = _scope_clause(resource_type, resource_ids)
        if dimensions is not None:
            where = f"{where} AND dimensions = ?" if where else " WHERE dimensions = ?"
            params.append(dimensions)
        rows = self._conn.execute(
            f"SELECT {_RECORD_COLUMNS} FROM embeddings{where} ORDER BY id LIMIT ?",
            (*params, limit),
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def list_by_resource(self, resource_id: str, resource_type: str) -> list[EmbeddingRecord]:
        """Return every record of one resource in insertion order."""
        rows = self._conn.execute(
            f"""
            SELECT {_RECORD_COLUMNS} FROM embeddings
            WHERE resource_id = ? AND resource_type = ? ORDER BY id
            """,
            (str(resource_id), resource_type),
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def count_by_resource(self, resource_id: str, resource_type: str) -> int:
        """Return the number of records stored for one resource."""
        return self._conn.execute(
            "SELECT COUNT(*) FROM embeddings WHERE resource_id = ? AND resource_type = ?",
            (str(resource_id), resource_type),
        ).fetchone()[0]

    def count(self) -> int:
        """Return the total number of stored records."""
        return self._conn.execute("SELECT COUNT(*) FROM embeddings").fetchone()[0]

    def nearest_by_cosine(
        self,
        vector: list[float],
        limit: int,
        *,
        resource_type: str | None = None,
        resource_ids: Collection[str] | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]:
        """Exhaustive cosine scan inside SQLite. Returns (record, similarity) best-first.

        Uses sqlite-vec's ``vec_distance_cosine``; similarity = 1 - distance.
        Zero-norm records score 0. Only records with the query's dimension
        are compared. Ties keep insertion order.
        """
        if resource_ids is not None and not resource_ids:
            return []
        where, params = _scope_clause(resource_type, resource_ids)
        where = f"{where} AND dimensions = ?" if where else " WHERE dimensions = ?"
        rows = self._conn.execute(
            f"""
            SELECT {_RECORD_COLUMNS},
                   CASE WHEN norm = 0 THEN 0.0
                        ELSE 1.0 - vec_distance_cosine(vector, ?)
                   END AS similarity
            FROM embeddings{where}
            ORDER BY similarity DESC, id
            LIMIT ?
            """,
            (encode_vector(vector), *params, len(vector), limit),
        ).fetchall()
        return [(_row_to_record(r), float(r["similarity"])) for r in rows]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------


def _scope_clause(
    resource_type: str | None, resource_ids: Collection[str] | None
) -> tuple[str, list[str | int]]:
    clauses: list[str] = []
    params: list[str | int] = []
    if resource_type is not None:
        clauses.append("resource_type = ?")
        params.append(resource_type)
    if resource_ids is not None:
        ids = sorted(str(i) for i in resource_ids)
        clauses.append(f"resource_id IN ({','.join('?' * len(ids))})")
        params.extend(ids)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _row_to_record(row: sqlite3.Row) -> EmbeddingRecord:
    return EmbeddingRecord(
        id=row["id"],
        resource_id=row["resource_id"],
        resource_type=row["resource_type"],
        content=row["content"],
        vector=decode_vector(row["vector"]),
        created_at=row["created_at"],
    )
