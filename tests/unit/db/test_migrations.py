"""Tests for the forward-only migration runner."""

from __future__ import annotations

import sqlite3

import pytest

from notefuse.db.connection import Database
from notefuse.db.migrations import MIGRATIONS, current_version, pending_migrations, run_migrations
from notefuse.db.schema import CURRENT_VERSION, initialize


def _fresh_conn(tmp_path):
    """Open a new connection without running migrations."""
    db = Database(tmp_path / "test.db", migrate=False)
    return db.connect()


def _table_exists(conn, name: str) -> bool:
    return conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (name,)
    ).fetchone() is not None


def _columns(conn, table: str) -> set[str]:
    return {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}


def test_fresh_database_is_version_zero(tmp_path):
    conn = _fresh_conn(tmp_path)
    assert current_version(conn) == 0
    conn.close()


def test_run_migrations_records_version(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert current_version(conn) == MIGRATIONS[-1][0] == CURRENT_VERSION
    conn.close()


def test_run_migrations_returns_applied_versions(tmp_path):
    conn = _fresh_conn(tmp_path)
    assert [v for v, _ in pending_migrations(conn)] == [v for v, _ in MIGRATIONS]
    assert run_migrations(conn) == [v for v, _ in MIGRATIONS]
    assert pending_migrations(conn) == []
    assert run_migrations(conn) == []
    conn.close()


def test_initialize_rejects_newer_schema(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_VERSION + 1,))
    conn.commit()
    with pytest.raises(RuntimeError):
        initialize(conn)
    conn.close()


def test_failed_migration_is_rolled_back(tmp_path, monkeypatch):
    conn = _fresh_conn(tmp_path)
    broken = [(1, "CREATE TABLE half_done (x INTEGER);\nNOT VALID SQL;")]
    monkeypatch.setattr("notefuse.db.migrations.MIGRATIONS", broken)
    with pytest.raises(sqlite3.Error):
        run_migrations(conn)
    assert current_version(conn) == 0
    assert not _table_exists(conn, "half_done")
    conn.close()


def test_run_migrations_idempotent(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    initialize(conn)
    count = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert count == len(MIGRATIONS)
    conn.close()


def test_embeddings_table_columns(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert _table_exists(conn, "embeddings")
    assert _columns(conn, "embeddings") == {
        "id",
        "resource_id",
        "resource_type",
        "content",
        "vector",
        "dimensions",
        "norm",
        "created_at",
    }
    conn.close()


def test_documents_table_created(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert _table_exists(conn, "documents")
    assert {"title", "body", "summary", "owner_id"} <= _columns(conn, "documents")
    conn.close()


def test_embeddings_have_no_foreign_key_to_documents(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    assert conn.execute("PRAGMA foreign_key_list(embeddings)").fetchall() == []
    conn.close()
