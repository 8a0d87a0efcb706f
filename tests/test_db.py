"""Tests for database initialization and the state table."""
import sqlite3
from pathlib import Path

import pytest

from studysphere.db import (
    STORAGE_KEY, StorageError, delete_state_blob, get_connection, init_db,
    read_state_blob, set_aside, write_state_blob,
)


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    tables = {row[0] for row in cursor.fetchall()}
    assert "app_state" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_dir(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "state.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "state.db").exists()


def test_read_missing_key_returns_none(tmp_db):
    init_db(tmp_db)
    assert read_state_blob(tmp_db) is None


def test_write_then_read(tmp_db):
    init_db(tmp_db)
    write_state_blob(tmp_db, '{"theme": "dark"}')
    assert read_state_blob(tmp_db) == '{"theme": "dark"}'


def test_write_overwrites_single_row(tmp_db):
    init_db(tmp_db)
    write_state_blob(tmp_db, "first")
    write_state_blob(tmp_db, "second")
    conn = get_connection(tmp_db)
    rows = conn.execute("SELECT * FROM app_state WHERE key = ?", (STORAGE_KEY,)).fetchall()
    conn.close()
    assert len(rows) == 1
    assert rows[0]["value"] == "second"
    assert rows[0]["updated_at"] is not None


def test_keys_are_independent(tmp_db):
    init_db(tmp_db)
    write_state_blob(tmp_db, "a", key="one")
    write_state_blob(tmp_db, "b", key="two")
    assert read_state_blob(tmp_db, key="one") == "a"
    assert read_state_blob(tmp_db, key="two") == "b"


def test_delete_state_blob(tmp_db):
    init_db(tmp_db)
    write_state_blob(tmp_db, "x")
    delete_state_blob(tmp_db)
    assert read_state_blob(tmp_db) is None


def test_write_failure_raises_storage_error(tmp_db):
    """Without the table the write fails and is surfaced, not swallowed."""
    with pytest.raises(StorageError):
        write_state_blob(tmp_db, "{}")


def test_delete_state_blob_without_table_raises(tmp_db):
    with pytest.raises(sqlite3.OperationalError):
        delete_state_blob(tmp_db)


def test_init_db_rejects_non_database_file(tmp_db):
    Path(tmp_db).write_bytes(b"garbage" * 500)
    with pytest.raises(sqlite3.DatabaseError):
        init_db(tmp_db)


def test_set_aside_moves_file(tmp_db):
    Path(tmp_db).write_bytes(b"garbage")
    aside = set_aside(tmp_db)
    assert aside.name.endswith(".corrupt")
    assert aside.read_bytes() == b"garbage"
    assert not Path(tmp_db).exists()
