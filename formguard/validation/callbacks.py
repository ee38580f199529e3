"""
Formguard Callbacks
===================

Built-in field callbacks.

A callback receives the validator and a field name. It can read any
field of the record and flags a failure with ``validator.add_error``.
Its return value is ignored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from formguard.validation.registry import default_registries
from formguard.validation.rules import is_empty

if TYPE_CHECKING:
    from formguard.validation.validator import Validator

register = default_registries.callbacks.register


@register()
def honeypot(validator: "Validator", field: str) -> None:
    """
    Trap for bots: the field is hidden from humans and must stay empty.

    Adds the ``invalid`` error when anything was filled in.
    """
    if not is_empty(validator.get(field)):
        validator.add_error(field, "invalid")
