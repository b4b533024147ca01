# src/todo_agenda/tasks/task_api.py

from __future__ import annotations

import logging
from typing import Any

from ..core.errors import AuthRequiredError
from ..core.state import AppState
from .task_models import Task
from .view import visible_tasks as _derive_visible

logger = logging.getLogger(__name__)


def _require_auth(state: AppState) -> None:
    if not state.is_authenticated:
        raise AuthRequiredError()


def add_task(
    state: AppState,
    title: str,
    *,
    due: Any = None,
    priority: Any = None,
) -> Task:
    """
    Create a task for the signed-in account.

    Without an explicit due date, a day/week agenda pre-fills its anchor date.
    """
    _require_auth(state)
    if due is None:
        due = state.view.suggested_due_date()
    return state.task_store.create(title, due_at=due, priority=priority)


def find_task(state: AppState, task_id: str) -> Task | None:
    return state.task_store.find_by_id(task_id)


def set_completed(state: AppState, task_id: str, completed: bool) -> Task | None:
    _require_auth(state)
    return state.task_store.update(task_id, completed=completed)


def toggle_task(state: AppState, task_id: str) -> Task | None:
    _require_auth(state)
    task = state.task_store.find_by_id(task_id)
    if task is None:
        return None
    return state.task_store.update(task_id, completed=not task.completed)


def edit_title(state: AppState, task_id: str, title: str) -> Task | None:
    _require_auth(state)
    return state.task_store.update(task_id, title=title)


def set_due(state: AppState, task_id: str, due: Any) -> Task | None:
    _require_auth(state)
    return state.task_store.update(task_id, due_at=due)


def set_priority(state: AppState, task_id: str, priority: Any) -> Task | None:
    _require_auth(state)
    return state.task_store.update(task_id, priority=priority)


def delete_task(state: AppState, task_id: str) -> Task | None:
    """Delete and return the removed task; None if it was already gone."""
    _require_auth(state)
    task = state.task_store.find_by_id(task_id)
    if task is None:
        return None
    state.task_store.remove(task_id)
    return task


def visible_tasks(state: AppState) -> list[Task]:
    if not state.is_authenticated:
        return []
    return _derive_visible(state.task_store.tasks, state.view)
