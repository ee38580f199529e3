"""
Formguard Form Presets
======================

Ready-made handlers for the site's contact and appointment forms.
"""

from __future__ import annotations

from typing import Dict, Optional

from formguard.core.config import Config
from formguard.forms.handler import FormHandler, FormMessages, SuccessHook
from formguard.validation.validator import Validator

HONEYPOT_MESSAGE = "You're not a human, are you?"

CONTACT_MESSAGES: Dict[str, Dict[str, str]] = {
    "name": {"required": "Name is required"},
    "surname": {"required": "Surname is required"},
    "email": {
        "required": "Email is required",
        "email": "Email is invalid",
    },
    "url": {"url": "URL is invalid"},
    "phone": {"required": "Phone is invalid"},
    "message": {"required": "Message is required"},
    "honeypot": {"invalid": HONEYPOT_MESSAGE},
}

APPOINTMENT_MESSAGES: Dict[str, Dict[str, str]] = {
    "dev_name": {"required": "Name is required"},
    "dev_surname": {"required": "Surname is required"},
    "dev_email": {
        "required": "Email is required",
        "email": "Email is invalid",
    },
    "dev_url": {"url": "URL is invalid"},
    "dev_from_date": {"date": "From date is not valid"},
    "dev_from_time": {"date": "From time is not valid"},
    "dev_to_date": {"date": "To date is not valid"},
    "dev_to_time": {"date": "To time is not valid"},
    "dev_phone": {"required": "Phone is invalid"},
    "dev_message": {"required": "Message is required"},
    "honeypot": {"invalid": HONEYPOT_MESSAGE},
}


def contact_validator() -> Validator:
    """Rules of the contact form."""
    return (
        Validator()
        .pre_filter("trim")
        .add_rules("name", "required")
        .add_rules("surname", "required")
        .add_rules("email", "required", "email")
        .add_rules("phone", "required")
        .add_rules("message", "required")
        .add_callbacks("honeypot", "honeypot")
    )


def appointment_validator() -> Validator:
    """Rules of the appointment form; dates and times are free text."""
    return (
        Validator()
        .pre_filter("trim")
        .add_rules("dev_name", "required")
        .add_rules("dev_surname", "required")
        .add_rules("dev_email", "required", "email")
        .add_rules("dev_phone", "required")
        .add_rules("dev_from_date", "date")
        .add_rules("dev_from_time", "date")
        .add_rules("dev_to_date", "date")
        .add_rules("dev_to_time", "date")
        .add_callbacks("honeypot", "honeypot")
    )


def contact_form(
    on_success: Optional[SuccessHook] = None,
    namespace: Optional[str] = "dev",
    config: Optional[Config] = None,
) -> FormHandler:
    """Handler for the contact form (fields posted under ``dev[...]``)."""
    return FormHandler(
        contact_validator(),
        FormMessages.from_config(CONTACT_MESSAGES, config),
        on_success=on_success,
        namespace=namespace,
    )


def appointment_form(
    on_success: Optional[SuccessHook] = None,
    namespace: Optional[str] = "dev",
    config: Optional[Config] = None,
) -> FormHandler:
    """Handler for the appointment form."""
    return FormHandler(
        appointment_validator(),
        FormMessages.from_config(APPOINTMENT_MESSAGES, config),
        on_success=on_success,
        namespace=namespace,
    )
