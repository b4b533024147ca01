# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_agenda.cli.bootstrap import create_initial_state
from todo_agenda.core.state import AppState
from todo_agenda.tasks.task_store import TaskStore

from .fakes import FixedClock, InMemoryKeyValueStore, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        console_enabled=False,
        default_sort="created",
        data_dir=tmp_path,
        db_path=tmp_path / "todo.sqlite3",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired exactly like the CLI does it.

    NOTE: We keep the real SQLite store here because its correctness is part
    of what we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def task_store(kv: InMemoryKeyValueStore, clock: FixedClock) -> TaskStore:
    store = TaskStore(kv, clock=clock, id_factory=SequentialIds())
    store.load("carol")
    return store
