"""
Formguard - Declarative Form Validation
=======================================

Validates flat form submissions with chain-configured filters, rules
and callbacks, and reports the first error of every field.

Quick Start:
    from formguard import Validator

    validator = (
        Validator(request.form)
        .pre_filter("trim")
        .add_rules("name", "required")
        .add_rules("email", "required", "email")
    )

    if not validator.validate():
        errors = validator.errors(messages)
"""

from __future__ import annotations

__version__ = "1.0.0"
__license__ = "MIT"

from typing import TYPE_CHECKING

# Core imports (always available)
from formguard.core.config import Config, get_config
from formguard.validation import (
    ConfigurationError,
    MessageLookupError,
    ValidationError,
    ValidationResult,
    Validator,
    validate,
    validate_or_fail,
)

# Lazy imports for performance
if TYPE_CHECKING:
    from formguard.forms import FormHandler, FormMessages, SubmissionResponse
    from formguard.security import Sanitizer
    from formguard.utils.logger import Logger


def __getattr__(name: str):
    """Lazy loading of the form glue and utilities."""
    _imports = {
        # Forms
        "FormHandler": "formguard.forms.handler",
        "FormMessages": "formguard.forms.handler",
        "SubmissionResponse": "formguard.forms.handler",
        "contact_form": "formguard.forms.presets",
        "appointment_form": "formguard.forms.presets",
        # Security
        "Sanitizer": "formguard.security.sanitizer",
        "sanitize": "formguard.security.sanitizer",
        # Utils
        "Logger": "formguard.utils.logger",
        "get_logger": "formguard.utils.logger",
        "configure_logging": "formguard.utils.logger",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'formguard' has no attribute '{name}'")


__all__ = [
    # Metadata
    "__version__",
    "__license__",
    # Core (always loaded)
    "Config",
    "get_config",
    "Validator",
    "ValidationError",
    "ValidationResult",
    "ConfigurationError",
    "MessageLookupError",
    "validate",
    "validate_or_fail",
    # Forms (lazy)
    "FormHandler",
    "FormMessages",
    "SubmissionResponse",
    "contact_form",
    "appointment_form",
    # Security (lazy)
    "Sanitizer",
    "sanitize",
    # Utils (lazy)
    "Logger",
    "get_logger",
    "configure_logging",
]
