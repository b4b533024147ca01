# src/todo_agenda/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.dates import normalize_date


class Priority(StrEnum):
    LOW = "low"
    MED = "med"
    HIGH = "high"

    @property
    def label(self) -> str:
        return _PRIORITY_LABELS[self]

    @classmethod
    def from_raw(cls, raw: Any) -> Priority | None:
        """Unknown or empty values mean "no priority"."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


_PRIORITY_LABELS = {
    Priority.HIGH: "High priority",
    Priority.MED: "Medium priority",
    Priority.LOW: "Low priority",
}

# Lower rank sorts first; tasks without a priority come last.
PRIORITY_RANK: dict[Priority | None, int] = {
    Priority.HIGH: 0,
    Priority.MED: 1,
    Priority.LOW: 2,
    None: 3,
}


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    created_at: str
    updated_at: str
    completed: bool = False

    description: str | None = None
    due_at: str | None = None  # YYYY-MM-DD
    priority: Priority | None = None

    def to_record(self) -> dict[str, Any]:
        """JSON-compatible record; absent optional fields are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.due_at is not None:
            out["dueAt"] = self.due_at
        if self.priority is not None:
            out["priority"] = self.priority.value
        return out

    @classmethod
    def from_record(cls, raw: Any, *, fallback_ts: str) -> Task | None:
        """
        Normalize a stored record.

        Records without a string id/title are dropped (None). Malformed dueAt or
        priority degrade to absent; missing timestamps become `fallback_ts`.
        """
        if not isinstance(raw, dict):
            return None
        task_id = raw.get("id")
        title = raw.get("title")
        if not isinstance(task_id, str) or not task_id:
            return None
        if not isinstance(title, str) or not title:
            return None

        created_at = raw.get("createdAt")
        updated_at = raw.get("updatedAt")
        description = raw.get("description")

        return cls(
            id=task_id,
            title=title,
            completed=bool(raw.get("completed", False)),
            created_at=created_at if isinstance(created_at, str) else fallback_ts,
            updated_at=updated_at if isinstance(updated_at, str) else fallback_ts,
            description=description if isinstance(description, str) else None,
            due_at=normalize_date(raw.get("dueAt")),
            priority=Priority.from_raw(raw.get("priority")),
        )
