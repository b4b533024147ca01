# src/todo_agenda/accounts/auth_api.py

from __future__ import annotations

import logging

from ..core.errors import ValidationError
from ..core.state import AppState
from ..tasks.view import SortKey
from .models import Account

logger = logging.getLogger(__name__)


def _default_sort(state: AppState) -> SortKey:
    return SortKey.from_raw(getattr(state.settings, "default_sort", None), SortKey.CREATED)


def set_current_account(state: AppState, account: Account | None) -> None:
    """
    Switch the active account.

    The task collection is fully replaced (never merged), the status filter
    and sort are reset; agenda scope and anchor carry over.
    """
    if account is None:
        state.sessions.clear()
        state.task_store.unload()
    else:
        state.sessions.activate(account)
        state.task_store.load(account.id)

    state.view.reset_for_account(_default_sort(state))


def restore_session(state: AppState) -> Account | None:
    """Startup: resolve the persisted session and load that account's tasks."""
    account = state.sessions.restore()
    if account is None:
        state.task_store.unload()
        state.view.reset_for_account(_default_sort(state))
        return None
    set_current_account(state, account)
    return account


async def sign_in(state: AppState, username: str, password: str) -> Account:
    if not (username or "").strip() or not password:
        raise ValidationError("Username and password are required.")

    account = await state.credentials.authenticate(username, password)
    set_current_account(state, account)
    logger.info("Signed in id=%s", account.id)
    return account


async def register(
    state: AppState,
    username: str,
    password: str,
    confirm: str | None = None,
) -> Account:
    if not (username or "").strip() or not password:
        raise ValidationError("Choose a username and password to continue.")
    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match.")

    account = await state.credentials.register(username, password)
    set_current_account(state, account)
    return account


def sign_out(state: AppState) -> None:
    previous = state.account
    set_current_account(state, None)
    if previous is not None:
        logger.info("Signed out id=%s", previous.id)
