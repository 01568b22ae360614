from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from .config import settings
from .exceptions import StoreError

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueStore:
    """JSON values keyed by string, kept in a single sqlite table."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def init(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(str(self.path))
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store at {self.path}: {e}") from e
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Store operation failed: {e}") from e
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        if not row:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt value under key '{key}'") from e

    def set(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) "
                "VALUES (?, ?, CURRENT_TIMESTAMP)",
                (key, json.dumps(value, ensure_ascii=False)),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key=?", (key,))


_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """Process-wide store bound to ``settings.db_path``."""
    global _store
    if _store is None or _store.path != Path(settings.db_path):
        _store = KeyValueStore(settings.db_path)
        _store.init()
    return _store


def init_db() -> None:
    store = get_store()
    log.info("Key/value store ready at %s", store.path)
