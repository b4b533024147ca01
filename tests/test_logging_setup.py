# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from todo_agenda.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("todo_agenda.tasks.task_store", logging.DEBUG, True),
        ("todo_agenda.storage.kv_store", logging.INFO, False),
        ("todo_agenda.storage.kv_store", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("py.warnings", logging.ERROR, True),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_noise_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
