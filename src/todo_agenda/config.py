# src/todo_agenda/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a local default.

Environment variables:
  TODO_APP_NAME         display name (default: todo-agenda)
  TODO_LOG_LEVEL        console log level (default: INFO)
  TODO_DATA_DIR         local data directory (default: .local/todo)
  TODO_DB_PATH          SQLite store (default: <data_dir>/todo.sqlite3)
  TODO_EXPORT_DIR       CSV export directory (default: <data_dir>/exports)
  TODO_DEFAULT_SORT     created | dueAt | priority (default: created)
  TODO_CONSOLE_ENABLED  run the console REPL (default: true)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

_SORT_KEYS = ("created", "dueAt", "priority")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env never overrides variables already set in the environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    for c in choices:
        if raw.lower() == c.lower():
            return c
    return default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Front end ----
    console_enabled: bool
    default_sort: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    export_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-agenda").strip() or "todo-agenda"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        default_sort = _env_choice(_k("DEFAULT_SORT"), _SORT_KEYS, "created")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "todo.sqlite3")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            default_sort=default_sort,
            data_dir=data_dir,
            db_path=db_path,
            export_dir=export_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
