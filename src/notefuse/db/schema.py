"""Database schema initialization."""

from __future__ import annotations

import sqlite3

from notefuse.db.migrations import MIGRATIONS, current_version, run_migrations

CURRENT_VERSION = MIGRATIONS[-1][0]


def initialize(conn: sqlite3.Connection) -> list[int]:
    """Bring the schema up to CURRENT_VERSION. Returns the versions applied.

    Raises:
        RuntimeError: If the database was written by a newer schema.
    """
    found = current_version(conn)
    if found > CURRENT_VERSION:
        raise RuntimeError(
            f"Database schema is version {found}; this notefuse supports up to {CURRENT_VERSION}."
        )
    return run_migrations(conn)
