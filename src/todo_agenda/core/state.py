# src/todo_agenda/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..accounts.credential_store import CredentialStore
from ..accounts.models import Account
from ..accounts.session import SessionManager
from ..tasks.task_store import TaskStore
from ..tasks.view import ViewState
from .ports import KeyValueStore


@dataclass
class AppState:
    """
    The single owned application state.

    Every operation receives this object instead of reading module globals;
    the visible task list is a pure function of `task_store.tasks` and `view`.
    """

    # Store Settings on the state for easy access in other modules.
    settings: Any

    kv: KeyValueStore
    credentials: CredentialStore
    sessions: SessionManager
    task_store: TaskStore

    view: ViewState = field(default_factory=ViewState)

    @property
    def account(self) -> Account | None:
        return self.sessions.current

    @property
    def is_authenticated(self) -> bool:
        return self.sessions.current is not None
