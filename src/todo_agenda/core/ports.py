# src/todo_agenda/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

Stores depend on these Protocols instead of concrete implementations,
so the SQLite backend can be swapped for an in-memory one in tests.
"""

from typing import Any, Protocol

from ..accounts.models import Account


class KeyValueStore(Protocol):
    """
    Namespaced JSON key/value store.

    Every write replaces the whole value for (namespace, key) atomically.
    get_json raises StorageCorruptionError when the stored blob cannot be parsed.
    """

    def get_json(self, namespace: str, key: str) -> Any | None: ...
    def put_json(self, namespace: str, key: str, value: Any) -> None: ...
    def insert_json(self, namespace: str, key: str, value: Any) -> bool: ...
    def delete(self, namespace: str, key: str) -> None: ...
    def keys(self, namespace: str) -> list[str]: ...


class AccountLookup(Protocol):
    """What the session manager needs from the credential store."""

    def get_account(self, account_id: str) -> Account | None: ...
