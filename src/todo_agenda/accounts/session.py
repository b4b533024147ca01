# src/todo_agenda/accounts/session.py

from __future__ import annotations

import logging

from ..core.errors import StorageCorruptionError
from ..core.ports import AccountLookup, KeyValueStore
from ..storage.kv_store import SESSION_KEY, SESSION_NS
from .models import Account

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Persisted pointer to the signed-in account.

    At most one session exists; activate() overwrites, clear() removes.
    A pointer to an account that no longer exists is discarded on restore.
    """

    def __init__(self, kv: KeyValueStore, accounts: AccountLookup) -> None:
        self._kv = kv
        self._accounts = accounts
        self._current: Account | None = None

    @property
    def current(self) -> Account | None:
        return self._current

    def restore(self) -> Account | None:
        try:
            raw = self._kv.get_json(SESSION_NS, SESSION_KEY)
        except StorageCorruptionError:
            logger.warning("Stored session is corrupt; discarding it.")
            self.clear()
            return None

        if raw is None:
            self._current = None
            return None

        account_id = raw.get("id") if isinstance(raw, dict) else None
        if not isinstance(account_id, str) or not account_id:
            logger.warning("Stored session has no account id; discarding it.")
            self.clear()
            return None

        account = self._accounts.get_account(account_id)
        if account is None:
            logger.warning("Stored session points to missing account %s; discarding it.", account_id)
            self.clear()
            return None

        self._current = account
        logger.info("Session restored id=%s", account.id)
        return account

    def activate(self, account: Account) -> None:
        self._kv.put_json(
            SESSION_NS,
            SESSION_KEY,
            {"id": account.id, "displayName": account.display_name},
        )
        self._current = account
        logger.debug("Session activated id=%s", account.id)

    def clear(self) -> None:
        self._kv.delete(SESSION_NS, SESSION_KEY)
        if self._current is not None:
            logger.debug("Session cleared id=%s", self._current.id)
        self._current = None
