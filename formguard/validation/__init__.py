"""
Formguard Validation System
===========================

Chain-configured validation of flat form submissions.

Features:
- Pre/post filters, rules and callbacks per field or for all fields
- Bracketed rule arguments (``length[4,10]``)
- First-error-per-field reporting with message tables
- Reusable configuration through copy()
"""

from formguard.validation.exceptions import (
    ConfigurationError,
    FormguardError,
    MessageLookupError,
)
from formguard.validation.registry import (
    Definition,
    Registries,
    Registry,
    default_registries,
    get_registries,
)
from formguard.validation.result import ValidationError, ValidationResult
from formguard.validation.rules import RuleContext, is_empty
from formguard.validation.validator import (
    WILDCARD,
    Shape,
    Validator,
    validate,
    validate_or_fail,
)

# Load the built-in library into the default registries
get_registries()

__all__ = [
    # Core
    "Validator",
    "ValidationError",
    "ValidationResult",
    "validate",
    "validate_or_fail",
    "Shape",
    "WILDCARD",
    # Registries
    "Definition",
    "Registry",
    "Registries",
    "default_registries",
    "get_registries",
    # Rules
    "RuleContext",
    "is_empty",
    # Errors
    "FormguardError",
    "ConfigurationError",
    "MessageLookupError",
]
