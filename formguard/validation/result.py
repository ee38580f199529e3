"""
Formguard Validation Result
===========================

The outcome of one validation run, as handed to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from formguard.validation.exceptions import FormguardError, MessageLookupError


class ValidationError(FormguardError):
    """
    Validation failed exception.

    Only raised on explicit request; validate() reports failures through
    its return value and the error map.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or {}

    def __str__(self) -> str:
        if self.errors:
            lines = [f"  - {name}: {code}" for name, code in self.errors.items()]
            return "Validation failed:\n" + "\n".join(lines)
        return "Validation failed"


def lookup_messages(
    errors: Mapping[str, str],
    table: Mapping[str, Mapping[str, str]],
) -> Dict[str, str]:
    """
    Join an error map against a per-field message table.

    Raises:
        MessageLookupError: ``table[field][code]`` is missing
    """
    messages: Dict[str, str] = {}
    for name, code in errors.items():
        try:
            messages[name] = table[name][code]
        except (KeyError, TypeError):
            raise MessageLookupError(name, code) from None
    return messages


@dataclass
class ValidationResult:
    """
    Result of validation.

    Attributes:
        success: True when no field recorded an error
        errors: Field name -> first error code
        record: The working record after post-filters
    """

    success: bool
    errors: Dict[str, str] = field(default_factory=dict)
    record: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """Allow using result as boolean."""
        return self.success

    def failed(self) -> bool:
        return not self.success

    def has_error(self, field_name: str) -> bool:
        return field_name in self.errors

    def messages(self, table: Mapping[str, Mapping[str, str]]) -> Dict[str, str]:
        """Error messages looked up in a caller-supplied table."""
        return lookup_messages(self.errors, table)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "errors": dict(self.errors),
            "record": dict(self.record),
        }

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if invalid."""
        if not self.success:
            raise ValidationError(errors=dict(self.errors))
