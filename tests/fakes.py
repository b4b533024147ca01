# tests/fakes.py

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from todo_agenda.core.errors import StorageCorruptionError


class InMemoryKeyValueStore:
    """
    In-memory KeyValueStore used for unit tests.

    Values are kept as JSON text (like the SQLite store) so tests can plant
    corrupt blobs; `writes` counts every mutating call that reached storage.
    """

    def __init__(self) -> None:
        self.data: dict[tuple[str, str], str] = {}
        self.writes = 0

    def put_raw(self, namespace: str, key: str, text: str) -> None:
        self.data[(namespace, key)] = text

    def get_json(self, namespace: str, key: str) -> Any | None:
        raw = self.data.get((namespace, key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageCorruptionError("corrupt", namespace=namespace, key=key) from e

    def put_json(self, namespace: str, key: str, value: Any) -> None:
        self.writes += 1
        self.data[(namespace, key)] = json.dumps(value)

    def insert_json(self, namespace: str, key: str, value: Any) -> bool:
        if (namespace, key) in self.data:
            return False
        self.put_json(namespace, key, value)
        return True

    def delete(self, namespace: str, key: str) -> None:
        self.writes += 1
        self.data.pop((namespace, key), None)

    def keys(self, namespace: str) -> list[str]:
        return sorted(k for ns, k in self.data if ns == namespace)


class FixedClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class SequentialIds:
    def __init__(self) -> None:
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"{self.n:032x}"


class FailingWritesKeyValueStore(InMemoryKeyValueStore):
    """Reads work; every put_json raises like a full disk would."""

    def put_json(self, namespace: str, key: str, value: Any) -> None:
        raise OSError("disk full")
