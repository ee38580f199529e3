"""
Formguard Form Handler
======================

Glue between a raw form submission and the validation engine.

A handler owns one configured template Validator and copies it for
every submission, so the rule set is built once and reused. The
response carries the success flag, the error codes, the post-filtered
record and a human-readable message built from a message table.

Delivering the message (mail, queue, ...) is left to an ``on_success``
callable supplied by the caller.

Example:
    template = (
        Validator()
        .pre_filter("trim")
        .add_rules("email", "required", "email")
    )
    handler = FormHandler(template, FormMessages.from_config({
        "email": {"required": "Email is required", "email": "Email is invalid"},
    }))

    response = handler.handle(request_form)
    return response.to_json()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import orjson

from formguard.core.config import Config, get_config
from formguard.security.sanitizer import Sanitizer
from formguard.utils.logger import get_logger
from formguard.validation.validator import MessageTable, Validator

logger = get_logger("formguard.forms")

SuccessHook = Callable[[Dict[str, Any]], bool]


@dataclass
class FormMessages:
    """
    Texts used to build the response message.

    ``form_error`` must contain an ``{errors}`` placeholder, which
    receives the field messages joined by ``error_separator``.
    """

    fields: Dict[str, Dict[str, str]] = field(default_factory=dict)
    form_error: str = "The following errors were encountered: {errors}"
    form_success: str = "Thank you! Your message has been sent."
    mail_failed: str = "An unknown error has occurred while sending your message"
    error_separator: str = "; "

    @classmethod
    def from_config(
        cls,
        fields: MessageTable,
        config: Optional[Config] = None,
    ) -> "FormMessages":
        """Field messages plus the ``forms.*`` texts from configuration."""
        section = (config or get_config()).section("forms")
        known = {"form_error", "form_success", "mail_failed", "error_separator"}
        texts = {key: str(value) for key, value in section.items() if key in known}
        return cls(fields={name: dict(codes) for name, codes in fields.items()}, **texts)


@dataclass
class SubmissionResponse:
    """What a form endpoint sends back to the browser."""

    success: bool
    message: str
    errors: Dict[str, str] = field(default_factory=dict)
    record: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "errors": dict(self.errors),
            "record": dict(self.record),
        }

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())


class FormHandler:
    """
    Validates submissions against a template validator.

    Args:
        template: Configured validator; its record is ignored
        messages: Response texts and the per-field message table
        on_success: Called with the validated record; a falsy return
            reports ``mail_failed``
        sanitizer: Cleans raw values first (a default Sanitizer if omitted)
        namespace: Key the form fields are nested under, if any
    """

    def __init__(
        self,
        template: Validator,
        messages: FormMessages,
        on_success: Optional[SuccessHook] = None,
        sanitizer: Optional[Sanitizer] = None,
        namespace: Optional[str] = None,
    ) -> None:
        self.template = template
        self.messages = messages
        self.on_success = on_success
        self.sanitizer = sanitizer or Sanitizer()
        self.namespace = namespace

    def extract(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Pick the form fields out of the raw submission and clean them."""
        data = raw.get(self.namespace) if self.namespace else raw
        if not isinstance(data, Mapping):
            return {}
        return self.sanitizer.clean(dict(data))

    def handle(self, raw: Mapping[str, Any]) -> SubmissionResponse:
        """Validate one submission and build the response."""
        validator = self.template.copy(self.extract(raw))

        if not validator.validate():
            errors = validator.errors()
            texts = validator.errors(self.messages.fields)
            logger.info("Form submission rejected", errors=",".join(errors) or "-")
            return SubmissionResponse(
                success=False,
                message=self.messages.form_error.format(
                    errors=self.messages.error_separator.join(texts.values())
                ),
                errors=errors,
                record=validator.as_dict(),
            )

        record = validator.as_dict()

        if self.on_success is not None and not self.on_success(record):
            logger.error("Form delivery failed", fields=len(record))
            return SubmissionResponse(
                success=False,
                message=self.messages.mail_failed,
                record=record,
            )

        logger.info("Form submission accepted", fields=len(record))
        return SubmissionResponse(
            success=True,
            message=self.messages.form_success,
            record=record,
        )
