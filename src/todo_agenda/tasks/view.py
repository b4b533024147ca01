# src/todo_agenda/tasks/view.py

from __future__ import annotations

"""
View engine.

Derives the visible task sequence from scratch on every call:
  status filter -> agenda window -> sort

There is no cached view; the result is a pure function of the task
collection and a ViewState.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core import dates
from ..core.errors import ValidationError
from .task_models import PRIORITY_RANK, Task


class _ParsableEnum(StrEnum):
    @classmethod
    def from_raw(cls, raw: Any, default: Any) -> Any:
        if isinstance(raw, cls):
            return raw
        for member in cls:
            if isinstance(raw, str) and raw.strip().lower() == member.value.lower():
                return member
        return default

    @classmethod
    def parse(cls, raw: Any) -> Any:
        member = cls.from_raw(raw, None)
        if member is None:
            choices = ", ".join(m.value for m in cls)
            raise ValidationError(f"Unknown value {raw!r}. Use one of: {choices}.")
        return member


class StatusFilter(_ParsableEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class AgendaScope(_ParsableEnum):
    ALL = "all"
    DAY = "day"
    WEEK = "week"


class SortKey(_ParsableEnum):
    CREATED = "created"
    DUE_AT = "dueAt"
    PRIORITY = "priority"


@dataclass(slots=True)
class ViewState:
    """
    Everything that shapes the visible sequence besides the tasks themselves.

    Agenda scope moves freely between all/day/week; the anchor date is
    adjusted independently of the scope.
    """

    status_filter: StatusFilter = StatusFilter.ALL
    sort_key: SortKey = SortKey.CREATED
    agenda_scope: AgendaScope = AgendaScope.ALL
    anchor: str = field(default_factory=dates.today)
    agenda_collapsed: bool = False

    def set_scope(self, scope: Any) -> None:
        self.agenda_scope = AgendaScope.parse(scope)

    def set_anchor(self, value: Any) -> None:
        self.anchor = dates.normalize_date(value) or dates.today()

    def shift_anchor(self, delta: int) -> None:
        self.anchor = dates.add_days(self.anchor, delta)

    def jump_to_today(self) -> None:
        self.anchor = dates.today()

    def toggle_agenda_collapsed(self) -> bool:
        self.agenda_collapsed = not self.agenda_collapsed
        return self.agenda_collapsed

    def suggested_due_date(self) -> str | None:
        """Due date to pre-fill for a new task while a day/week agenda is shown."""
        if self.agenda_scope in (AgendaScope.DAY, AgendaScope.WEEK):
            return self.anchor
        return None

    def reset_for_account(self, default_sort: SortKey) -> None:
        self.status_filter = StatusFilter.ALL
        self.sort_key = default_sort


def filter_by_status(tasks: Iterable[Task], status: StatusFilter) -> list[Task]:
    if status is StatusFilter.ACTIVE:
        return [t for t in tasks if not t.completed]
    if status is StatusFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def filter_by_agenda(tasks: Iterable[Task], scope: AgendaScope, anchor: str) -> list[Task]:
    """Undated tasks never belong to a specific day or week."""
    if scope is AgendaScope.DAY:
        return [t for t in tasks if t.due_at and t.due_at == anchor]
    if scope is AgendaScope.WEEK:
        week = dates.week_range(anchor)
        return [t for t in tasks if week.contains(t.due_at)]
    return list(tasks)


def _created_desc(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: dates.timestamp_key(t.created_at), reverse=True)


def sort_tasks(tasks: Iterable[Task], key: SortKey) -> list[Task]:
    # Python's sort is stable: sorting by createdAt desc first makes it the
    # tie-break for the primary key applied second.
    ordered = _created_desc(tasks)
    if key is SortKey.DUE_AT:
        return sorted(ordered, key=lambda t: (t.due_at is None, t.due_at or ""))
    if key is SortKey.PRIORITY:
        return sorted(ordered, key=lambda t: PRIORITY_RANK[t.priority])
    return ordered


def visible_tasks(tasks: Iterable[Task], view: ViewState) -> list[Task]:
    filtered = filter_by_status(tasks, view.status_filter)
    windowed = filter_by_agenda(filtered, view.agenda_scope, view.anchor)
    return sort_tasks(windowed, view.sort_key)


def format_meta(task: Task, *, today_iso: str | None = None) -> str:
    parts: list[str] = []
    if task.priority is not None:
        parts.append(task.priority.label)
    if task.due_at:
        parts.append(dates.format_due_date(task.due_at, today_iso=today_iso))
    return " • ".join(p for p in parts if p)
