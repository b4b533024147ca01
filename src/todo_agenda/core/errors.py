# src/todo_agenda/core/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for errors whose message can be shown to the user as-is."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TodoError):
    """Bad input shape or length; the user must correct and resubmit."""


class ConflictError(TodoError):
    """Duplicate username on registration."""


class NotFoundError(TodoError):
    """Unknown username or referenced-but-missing account."""


class InvalidCredentialError(TodoError):
    """Password does not match the stored hash."""


class StorageCorruptionError(TodoError):
    """
    Persisted blob could not be parsed.

    Never surfaced to the user: loaders downgrade it to an empty value.
    """

    def __init__(self, message: str, *, namespace: str = "", key: str = "") -> None:
        super().__init__(message)
        self.namespace = namespace
        self.key = key


class AuthRequiredError(TodoError):
    """A task mutation was attempted while signed out."""

    def __init__(self, message: str = "Sign in to add tasks.") -> None:
        super().__init__(message)
