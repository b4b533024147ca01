# src/todo_agenda/tasks/export.py

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime

from .task_models import Task

EXPORT_COLUMNS = ("id", "title", "completed", "createdAt", "updatedAt", "dueAt", "priority")


def _row(task: Task) -> list[str]:
    return [
        task.id,
        task.title,
        "true" if task.completed else "false",
        task.created_at,
        task.updated_at,
        task.due_at or "",
        task.priority.value if task.priority else "",
    ]


def export_csv(tasks: Iterable[Task]) -> str:
    """
    Render tasks (already in visible order) as CSV.

    Only fields containing the delimiter, a quote or a newline are quoted.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for task in tasks:
        writer.writerow(_row(task))
    return buf.getvalue().rstrip("\n")


def export_filename(now: datetime | None = None) -> str:
    stamp = now or datetime.now()
    return f"todo-{stamp.strftime('%Y%m%d-%H%M%S')}.csv"
