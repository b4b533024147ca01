# src/todo_agenda/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.errors import StorageCorruptionError

logger = logging.getLogger(__name__)

# Namespaces. The (namespace, key) pair is the whole addressing scheme:
#   users   / <normalized username> -> {passwordHash, displayName, createdAt}
#   session / "current"             -> {id, displayName}
#   tasks   / <account id>          -> [task record, ...]
USERS_NS = "users"
SESSION_NS = "session"
TASKS_NS = "tasks"

SESSION_KEY = "current"


class SqliteKeyValueStore:
    """
    SQLite namespaced key/value store holding JSON blobs.

    The schema is intentionally simple:
    - one table, primary key (namespace, key)
    - every write is a single committed statement, so readers never observe
      a half-written value

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "todo.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count()
        except sqlite3.Error:
            total = -1
        logger.info("KeyValueStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _encode(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    # ---- raw access ----

    def get(self, namespace: str, key: str) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "SELECT value FROM kv WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = cur.fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def put(self, namespace: str, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(namespace, key, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(namespace, key)
                DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (namespace, key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get_json(self, namespace: str, key: str) -> Any | None:
        raw = self.get(namespace, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageCorruptionError(
                f"Unparseable value at {namespace}/{key}", namespace=namespace, key=key
            ) from e

    def put_json(self, namespace: str, key: str, value: Any) -> None:
        self.put(namespace, key, self._encode(value))
        logger.debug("kv put ns=%s key=%s", namespace, key)

    def insert_json(self, namespace: str, key: str, value: Any) -> bool:
        """Insert only if (namespace, key) is absent. Returns False on conflict."""
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO kv(namespace, key, value, updated_at) VALUES (?, ?, ?, ?)",
                (namespace, key, self._encode(value), time.time()),
            )
            conn.commit()
            return True
        except sqlite3.IntegrityError:
            return False
        finally:
            conn.close()

    def delete(self, namespace: str, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE namespace = ? AND key = ?", (namespace, key))
            conn.commit()
        finally:
            conn.close()

    def keys(self, namespace: str) -> list[str]:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "SELECT key FROM kv WHERE namespace = ? ORDER BY key ASC", (namespace,)
            )
            return [str(r["key"]) for r in cur.fetchall()]
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM kv").fetchone()
            return int(n)
        finally:
            conn.close()
