from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from spelling_session.config import PREFERENCES_DB_PATH
from spelling_session.errors import StorageFailure


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SqliteKeyValueStore:
    """Durable preference storage in a single ``preferences`` table."""

    def __init__(self, db_path: Path = PREFERENCES_DB_PATH) -> None:
        self.db_path = db_path
        self._initialized = False

    @contextmanager
    def connect(self):
        if not self._initialized:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            if not self._initialized:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
                self._initialized = True
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageFailure(f"preference storage error: {exc}") from exc
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        with self.connect() as conn:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def remove(self, key: str) -> None:
        with self.connect() as conn:
            conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
