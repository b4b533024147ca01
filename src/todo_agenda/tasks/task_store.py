# src/todo_agenda/tasks/task_store.py

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any

from ..core.dates import Clock, format_timestamp, normalize_date, timestamp_key, utc_now
from ..core.errors import AuthRequiredError, StorageCorruptionError, ValidationError
from ..core.ports import KeyValueStore
from ..storage.kv_store import TASKS_NS
from .task_models import Priority, Task

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def new_task_id() -> str:
    return secrets.token_hex(16)


class TaskStore:
    """
    Per-account task collection with write-through persistence.

    Holds the in-memory collection of exactly one account (or none while signed
    out). Every mutation updates memory and storage before returning; the
    collection is ordered newest-first by insertion.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._kv = kv
        self._clock = clock or utc_now
        self._id_factory = id_factory or new_task_id
        self._account_id: str | None = None
        self._tasks: list[Task] = []

    @property
    def account_id(self) -> str | None:
        return self._account_id

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def _now(self) -> str:
        return format_timestamp(self._clock())

    def _require_account(self) -> str:
        if self._account_id is None:
            raise AuthRequiredError()
        return self._account_id

    # ---- persistence ----

    def _read(self, account_id: str) -> list[Any]:
        raw = self._kv.get_json(TASKS_NS, account_id)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageCorruptionError(
                f"Task collection for {account_id} is not a list",
                namespace=TASKS_NS,
                key=account_id,
            )
        return raw

    def load(self, account_id: str) -> list[Task]:
        """
        Replace the in-memory collection with `account_id`'s stored tasks.

        Corrupt storage is recovered here and only here: it loads as empty.
        """
        try:
            raw = self._read(account_id)
        except StorageCorruptionError as e:
            logger.warning("Stored tasks unreadable for %s (%s); starting empty.", account_id, e)
            raw = []

        fallback_ts = self._now()
        tasks: list[Task] = []
        dropped = 0
        for item in raw:
            task = Task.from_record(item, fallback_ts=fallback_ts)
            if task is None:
                dropped += 1
                continue
            tasks.append(task)

        if dropped:
            logger.debug("Dropped %d malformed task records for %s", dropped, account_id)

        self._account_id = account_id
        self._tasks = tasks
        logger.debug("Loaded %d tasks for %s", len(tasks), account_id)
        return list(tasks)

    def unload(self) -> None:
        """Forget the in-memory collection (signed out). Storage is untouched."""
        self._account_id = None
        self._tasks = []

    def save(self, account_id: str, tasks: Iterable[Task]) -> None:
        self._kv.put_json(TASKS_NS, account_id, [t.to_record() for t in tasks])

    def _commit(self, tasks: list[Task]) -> None:
        # Memory follows storage: a failed write leaves the collection as it was.
        self.save(self._require_account(), tasks)
        self._tasks = tasks

    # ---- CRUD ----

    def create(
        self,
        title: str,
        *,
        description: str | None = None,
        due_at: Any = None,
        priority: Any = None,
    ) -> Task:
        self._require_account()
        clean_title = (title or "").strip()
        if not clean_title:
            raise ValidationError("Task title cannot be empty.")

        existing = {t.id for t in self._tasks}
        task_id = self._id_factory()
        while task_id in existing:
            task_id = self._id_factory()

        now = self._now()
        task = Task(
            id=task_id,
            title=clean_title,
            completed=False,
            created_at=now,
            updated_at=now,
            description=description,
            due_at=normalize_date(due_at),
            priority=Priority.from_raw(priority),
        )
        self._commit([task, *self._tasks])
        logger.debug("Task created id=%s due_at=%s priority=%s", task.id, task.due_at, task.priority)
        return task

    def update(
        self,
        task_id: str,
        *,
        title: Any = _UNSET,
        completed: Any = _UNSET,
        description: Any = _UNSET,
        due_at: Any = _UNSET,
        priority: Any = _UNSET,
    ) -> Task | None:
        """
        Apply only the given fields.

        Returns the task as it stands afterwards, or None if `task_id` is absent.
        When nothing actually changes, neither updated_at nor storage is touched.
        """
        self._require_account()
        index = next((i for i, t in enumerate(self._tasks) if t.id == task_id), None)
        if index is None:
            return None
        current = self._tasks[index]

        patch: dict[str, Any] = {}
        if title is not _UNSET:
            clean_title = (title or "").strip()
            if not clean_title:
                raise ValidationError("Task title cannot be empty.")
            patch["title"] = clean_title
        if completed is not _UNSET:
            patch["completed"] = bool(completed)
        if description is not _UNSET:
            patch["description"] = description if isinstance(description, str) else None
        if due_at is not _UNSET:
            patch["due_at"] = normalize_date(due_at)
        if priority is not _UNSET:
            patch["priority"] = Priority.from_raw(priority)

        changes = {k: v for k, v in patch.items() if getattr(current, k) != v}
        if not changes:
            return current

        now = self._now()
        if timestamp_key(now) < timestamp_key(current.created_at):
            now = current.created_at
        updated = replace(current, **changes, updated_at=now)

        self._commit([*self._tasks[:index], updated, *self._tasks[index + 1 :]])
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return updated

    def remove(self, task_id: str) -> bool:
        self._require_account()
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._commit(remaining)
        logger.debug("Task removed id=%s", task_id)
        return True

    def find_by_id(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)
