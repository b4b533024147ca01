# src/todo_agenda/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the key/value store into the credential, session and task stores,
- restores the persisted session (and its tasks) on startup.
"""

from __future__ import annotations

import logging

from ..accounts.auth_api import restore_session
from ..accounts.credential_store import CredentialStore
from ..accounts.session import SessionManager
from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, kv: KeyValueStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the store) injectable makes the app easy to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.db_path)

    credentials = CredentialStore(kv)
    state = AppState(
        settings=settings,
        kv=kv,
        credentials=credentials,
        sessions=SessionManager(kv, credentials),
        task_store=TaskStore(kv),
    )
    return state


def start_app(*, settings=None, kv: KeyValueStore | None = None) -> AppState:
    """Build state, then resolve the persisted session and load its tasks."""
    state = create_initial_state(settings=settings, kv=kv)
    account = restore_session(state)
    if account is None:
        logger.info("No active session; sign in or register to continue.")
    else:
        logger.info(
            "Welcome back %s (%d tasks).", account.display_name, len(state.task_store.tasks)
        )
    return state
