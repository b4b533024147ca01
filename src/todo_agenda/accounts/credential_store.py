# src/todo_agenda/accounts/credential_store.py

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import logging
from collections.abc import AsyncIterator

from ..core.dates import Clock, format_timestamp, utc_now
from ..core.errors import (
    ConflictError,
    InvalidCredentialError,
    NotFoundError,
    StorageCorruptionError,
    ValidationError,
)
from ..core.ports import KeyValueStore
from ..storage.kv_store import USERS_NS
from .models import Account, AccountRecord

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def normalize_username(value: str) -> str:
    return (value or "").strip().lower()


def _sha256_hex(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


async def hash_password(password: str) -> str:
    """
    Unsalted SHA-256 of the UTF-8 password as lowercase hex.

    Runs in a worker thread; callers must await it before producing a result.
    """
    return await asyncio.to_thread(_sha256_hex, password)


class CredentialStore:
    """
    Account table over the `users` namespace.

    register/authenticate are serialized per normalized username so that no
    other operation touches the same account while its hash is being computed.
    """

    def __init__(self, kv: KeyValueStore, *, clock: Clock | None = None) -> None:
        self._kv = kv
        self._clock = clock or utc_now
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @contextlib.asynccontextmanager
    async def _account_lock(self, account_id: str) -> AsyncIterator[None]:
        """Hold the per-username lock; the entry is dropped when its last user leaves."""
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        self._lock_users[account_id] = self._lock_users.get(account_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            users = self._lock_users[account_id] - 1
            if users:
                self._lock_users[account_id] = users
            else:
                del self._lock_users[account_id]
                del self._locks[account_id]

    def _get_record(self, account_id: str) -> AccountRecord | None:
        try:
            raw = self._kv.get_json(USERS_NS, account_id)
        except StorageCorruptionError:
            logger.warning("Account record for %s is corrupt; treating as missing.", account_id)
            return None
        if raw is None:
            return None
        record = AccountRecord.from_record(account_id, raw)
        if record is None:
            logger.warning("Account record for %s is malformed; treating as missing.", account_id)
        return record

    # ---- public API ----

    def get_account(self, account_id: str) -> Account | None:
        if not account_id:
            return None
        record = self._get_record(account_id)
        return record.to_account() if record else None

    def list_account_ids(self) -> list[str]:
        return self._kv.keys(USERS_NS)

    async def register(self, username: str, password: str) -> Account:
        clean_name = (username or "").strip()
        password = password or ""
        if len(clean_name) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters long."
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

        account_id = normalize_username(clean_name)
        async with self._account_lock(account_id):
            if self._get_record(account_id) is not None:
                raise ConflictError("That username is already taken.")

            password_hash = await hash_password(password)
            record = AccountRecord(
                id=account_id,
                display_name=clean_name,
                password_hash=password_hash,
                created_at=format_timestamp(self._clock()),
            )
            if not self._kv.insert_json(USERS_NS, account_id, record.to_record()):
                raise ConflictError("That username is already taken.")

        logger.info("Account registered id=%s", account_id)
        return record.to_account()

    async def authenticate(self, username: str, password: str) -> Account:
        account_id = normalize_username(username)
        if not account_id:
            raise ValidationError("Enter your username to sign in.")

        async with self._account_lock(account_id):
            record = self._get_record(account_id)
            if record is None:
                raise NotFoundError("Account not found.")

            password_hash = await hash_password(password or "")
            if password_hash != record.password_hash:
                logger.info("Authentication failed id=%s", account_id)
                raise InvalidCredentialError("Incorrect password.")

        logger.info("Authenticated id=%s", account_id)
        return record.to_account()
