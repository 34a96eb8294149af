"""Forward-only schema migrations.

Each migration runs in one transaction together with the ``schema_version``
row that records it, so a failed migration leaves no partial schema behind.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

# No foreign key from embeddings to documents: the document store is an
# external collaborator and integrity between the two is advisory.
_V1_SQL = """
CREATE TABLE IF NOT EXISTS embeddings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    resource_id     TEXT NOT NULL,
    resource_type   TEXT NOT NULL,
    content         TEXT NOT NULL,
    vector          BLOB NOT NULL,
    dimensions      INTEGER NOT NULL,
    norm            REAL NOT NULL,
    created_at      DATETIME NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_embeddings_resource
    ON embeddings(resource_type, resource_id);

CREATE TABLE IF NOT EXISTS documents (
    resource_id     TEXT NOT NULL,
    resource_type   TEXT NOT NULL,
    title           TEXT NOT NULL DEFAULT '',
    body            TEXT NOT NULL DEFAULT '',
    summary         TEXT,
    owner_id        TEXT,
    created_at      DATETIME NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (resource_type, resource_id)
);

CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);
"""

# Append-only: (version, sql), versions strictly increasing.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def current_version(conn: sqlite3.Connection) -> int:
    """Highest applied migration version; 0 for a fresh database."""
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()
    (version,) = conn.execute("SELECT COALESCE(MAX(version), 0) FROM schema_version").fetchone()
    return version


def pending_migrations(conn: sqlite3.Connection) -> list[tuple[int, str]]:
    """Migrations newer than the database, oldest first."""
    applied = current_version(conn)
    return [(version, sql) for version, sql in MIGRATIONS if version > applied]


def run_migrations(conn: sqlite3.Connection) -> list[int]:
    """Apply every pending migration. Safe to call on a database at any version.

    Returns:
        Versions applied by this call, in order (empty if already current).

    Raises:
        sqlite3.Error: If a migration fails; that migration is rolled back.
    """
    applied: list[int] = []
    for version, sql in pending_migrations(conn):
        script = (
            f"BEGIN;\n{sql}\n"
            f"INSERT INTO schema_version (version) VALUES ({int(version)});\n"
            "COMMIT;"
        )
        try:
            conn.executescript(script)
        except sqlite3.Error:
            if conn.in_transaction:
                conn.rollback()
            raise
        logger.info("Applied schema migration %d", version)
        applied.append(version)
    return applied
