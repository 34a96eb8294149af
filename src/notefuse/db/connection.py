"""SQLite connections for the embedding store.

Every connection gets sqlite-vec loaded, ``sqlite3.Row`` rows, WAL journaling
and a busy timeout, so the enrichment threads can read while an indexer writes.
The first connection a ``Database`` opens also brings the schema up to date.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import sqlite_vec

from notefuse.db.schema import initialize

# Milliseconds a connection waits on a locked database before failing.
BUSY_TIMEOUT_MS = 5000


class Database:
    """A SQLite file holding embedding records and, optionally, documents.

    Args:
        db_path: Path to the database file (created if missing).
        migrate: Apply pending migrations on the first connect(). Turn off to
            inspect or migrate a database by hand.
    """

    def __init__(self, db_path: Path | str, *, migrate: bool = True) -> None:
        self.db_path = Path(db_path)
        self.migrate = migrate
        self._migrated = False
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Open and configure a new connection. The caller closes it."""
        conn = sqlite3.connect(self.db_path)
        try:
            _configure(conn)
            if self.migrate and not self._migrated:
                initialize(conn)
                self._migrated = True
        except Exception:
            conn.close()
            raise
        return conn

    def __enter__(self) -> sqlite3.Connection:
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None


def _configure(conn: sqlite3.Connection) -> None:
    conn.row_factory = sqlite3.Row
    conn.enable_load_extension(True)
    sqlite_vec.load(conn)
    conn.enable_load_extension(False)
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute(f"PRAGMA busy_timeout = {BUSY_TIMEOUT_MS}")
