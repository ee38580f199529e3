"""
Formguard Forms
===============

Submission handling on top of the validation engine.
"""

from formguard.forms.handler import FormHandler, FormMessages, SubmissionResponse
from formguard.forms.presets import (
    APPOINTMENT_MESSAGES,
    CONTACT_MESSAGES,
    appointment_form,
    appointment_validator,
    contact_form,
    contact_validator,
)

__all__ = [
    "FormHandler",
    "FormMessages",
    "SubmissionResponse",
    "CONTACT_MESSAGES",
    "APPOINTMENT_MESSAGES",
    "contact_form",
    "contact_validator",
    "appointment_form",
    "appointment_validator",
]
