"""
Formguard Validation Exceptions
===============================

Configuration problems are raised when a validator is being set up.
Validation failures are never raised by the engine itself, they are
collected into the error map.
"""

from __future__ import annotations

from typing import Any


class FormguardError(Exception):
    """Base class for all formguard errors."""


class ConfigurationError(FormguardError):
    """
    A filter, rule or callback could not be registered.

    Raised immediately at registration, never deferred to validate().
    """

    def __init__(self, message: str, target: Any = None) -> None:
        super().__init__(message)
        self.target = target


class MessageLookupError(FormguardError, KeyError):
    """
    The caller's message table has no entry for a field/code pair.

    The caller must supply a complete table for every field and error
    code that can occur.
    """

    def __init__(self, field: str, code: str) -> None:
        super().__init__(field, code)
        self.field = field
        self.code = code

    def __str__(self) -> str:
        return f"No message for field '{self.field}' and error '{self.code}'"


def describe(target: Any) -> str:
    """Readable name of a callable or registration target."""
    if isinstance(target, str):
        return target
    return getattr(target, "__qualname__", None) or getattr(target, "__name__", None) or repr(target)
