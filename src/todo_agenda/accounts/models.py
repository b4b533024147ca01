# src/todo_agenda/accounts/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Account:
    """A registered user as seen by the rest of the app (never carries the hash)."""

    id: str
    display_name: str
    created_at: str | None = None


@dataclass(frozen=True, slots=True)
class AccountRecord:
    id: str
    display_name: str
    password_hash: str
    created_at: str

    def to_account(self) -> Account:
        return Account(id=self.id, display_name=self.display_name, created_at=self.created_at)

    def to_record(self) -> dict[str, Any]:
        return {
            "passwordHash": self.password_hash,
            "displayName": self.display_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, account_id: str, raw: Any) -> AccountRecord | None:
        if not isinstance(raw, dict):
            return None
        password_hash = raw.get("passwordHash")
        if not isinstance(password_hash, str) or not password_hash:
            return None
        display_name = raw.get("displayName")
        created_at = raw.get("createdAt")
        return cls(
            id=account_id,
            display_name=display_name if isinstance(display_name, str) and display_name else account_id,
            password_hash=password_hash,
            created_at=created_at if isinstance(created_at, str) else "",
        )
