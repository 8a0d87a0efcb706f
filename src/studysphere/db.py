"""Database initialization and connection management."""
import os
import sqlite3
from datetime import datetime
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "STUDYSPHERE_DB", str(Path.home() / ".studysphere" / "studysphere.db")
)
STORAGE_KEY = "studysphere_v1"

SCHEMA = """
CREATE TABLE IF NOT EXISTS app_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


class StorageError(RuntimeError):
    """Raised when the state document could not be written."""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the state table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


def set_aside(db_path: str) -> Path:
    """Rename an unreadable database file so a fresh one can take its place."""
    path = Path(db_path)
    aside = path.with_name(path.name + ".corrupt")
    path.replace(aside)
    return aside


def read_state_blob(db_path: str, key: str = STORAGE_KEY) -> str | None:
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT value FROM app_state WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    return row["value"] if row else None


def write_state_blob(db_path: str, value: str, key: str = STORAGE_KEY) -> None:
    """Write the whole serialized document under `key` in one statement."""
    try:
        conn = get_connection(db_path)
        try:
            conn.execute(
                "INSERT INTO app_state (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise StorageError(f"Could not save state: {e}") from e


def delete_state_blob(db_path: str, key: str = STORAGE_KEY) -> None:
    conn = get_connection(db_path)
    try:
        conn.execute("DELETE FROM app_state WHERE key = ?", (key,))
        conn.commit()
    finally:
        conn.close()
