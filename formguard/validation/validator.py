"""
Formguard Validator
===================

Core validation engine.

A Validator wraps one submitted record. Filters, rules and callbacks are
registered per field (or for every field with the ``"*"`` wildcard) and
validate() runs them as a fixed pipeline:

1. missing configured fields are added to the record
2. pre-filters
3. rules, in registration order, stopping at a field's first error
4. callbacks, for fields without an error
5. post-filters, which run even when validation failed

Example:
    validator = (
        Validator({"name": " Ann ", "email": "ann@example.com"})
        .pre_filter("trim")
        .add_rules("name", "required", "length[2,50]")
        .add_rules("email", "required", "email")
        .add_callbacks("honeypot", "honeypot")
    )

    if validator.validate():
        send(validator.as_dict())
    else:
        print(validator.errors(messages))
"""

from __future__ import annotations

from copy import copy as shallow_copy
from dataclasses import dataclass
from enum import Enum
from itertools import chain
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from formguard.core.config import Config, get_config
from formguard.utils.helpers import map_value, unique
from formguard.utils.logger import get_logger
from formguard.validation.arguments import parse_reference, split_pipeline
from formguard.validation.exceptions import ConfigurationError, describe
from formguard.validation.registry import Definition, Registries, get_registries
from formguard.validation.result import ValidationError, ValidationResult, lookup_messages
from formguard.validation.rules import RuleContext, is_empty

logger = get_logger("formguard.validator")

WILDCARD = "*"

FieldTarget = Union[str, bool]
RuleSpec = Union[str, Callable[..., Any], Definition, Tuple[Any, Sequence[str]]]
MessageTable = Mapping[str, Mapping[str, str]]


class Shape(str, Enum):
    """Declared shape of a field's value."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class BoundRule:
    """A rule definition together with the arguments it was registered with."""

    definition: Definition
    args: Optional[List[str]] = None

    @property
    def name(self) -> str:
        return self.definition.name


class Validator:
    """
    Field validation for one submitted record.

    Registration methods return the validator so calls can be chained.
    Unknown filters, rules or callbacks raise ConfigurationError at
    registration.
    """

    def __init__(
        self,
        record: Optional[Mapping[str, Any]] = None,
        *,
        decimal_separator: Optional[str] = None,
        empty_rules: Optional[Iterable[str]] = None,
        dns_timeout: Optional[float] = None,
        registries: Optional[Registries] = None,
        config: Optional[Config] = None,
    ) -> None:
        """
        Initialize validator.

        Args:
            record: Submitted field values; an empty record means
                nothing was submitted and validate() will fail
            decimal_separator: Separator accepted by ``numeric``
            empty_rules: Rules that also run on empty values
            dns_timeout: Lifetime of the MX lookup in ``email_domain``
            registries: Where rule/filter/callback names are resolved
            config: Configuration to read defaults from
        """
        config = config or get_config()

        self._record: Dict[str, Any] = dict(record or {})
        self._submitted = bool(self._record)

        self.registries = registries or get_registries()

        if decimal_separator is None:
            decimal_separator = config.get("validation.decimal_separator", ".")
        if not isinstance(decimal_separator, str) or not decimal_separator:
            raise ConfigurationError(
                f"Invalid decimal separator {decimal_separator!r}", decimal_separator
            )
        self.decimal_separator = decimal_separator

        if empty_rules is None:
            empty_rules = config.get_list("validation.empty_rules", ["required", "matches"])
        self._empty_rules: List[str] = list(empty_rules)

        if dns_timeout is None:
            dns_timeout = config.get_float("validation.dns_timeout", 5.0)
        self.dns_timeout = dns_timeout

        # Configuration, shared by copies
        self._pre_filters: Dict[str, List[Definition]] = {}
        self._post_filters: Dict[str, List[Definition]] = {}
        self._rules: Dict[str, List[BoundRule]] = {}
        self._callbacks: Dict[str, List[Definition]] = {}
        self._shapes: Dict[str, Shape] = {}

        # Run state, reset by copies
        self._errors: Dict[str, str] = {}
        self._messages: Dict[str, str] = {}

    @classmethod
    def factory(cls, record: Optional[Mapping[str, Any]] = None, **options: Any) -> "Validator":
        """Create a new Validator."""
        return cls(record, **options)

    @classmethod
    def from_rules(
        cls,
        record: Optional[Mapping[str, Any]],
        rules: Mapping[str, Union[str, Sequence[RuleSpec]]],
        **options: Any,
    ) -> "Validator":
        """
        Build a validator from a field -> rules mapping.

        Example:
            Validator.from_rules(data, {
                "name": "required|length[2,50]",
                "email": ["required", "email"],
            })
        """
        validator = cls(record, **options)
        for field_name, spec in rules.items():
            references = split_pipeline(spec) if isinstance(spec, str) else list(spec)
            validator.add_rules(field_name, *references)
        return validator

    # =========================================================================
    # Record access
    # =========================================================================

    def get(self, field: str, default: Any = None) -> Any:
        """Current value of a field."""
        return self._record.get(field, default)

    def set(self, field: str, value: Any) -> "Validator":
        self._record[field] = value
        return self

    def __getitem__(self, field: str) -> Any:
        return self._record[field]

    def __contains__(self, field: str) -> bool:
        return field in self._record

    def as_dict(self) -> Dict[str, Any]:
        """Copy of the working record."""
        return dict(self._record)

    def safe_dict(self, *fields: str) -> Dict[str, Any]:
        """
        Only the configured fields, optionally narrowed to ``fields``.

        Configured fields missing from the record come back as None.
        """
        choices = set(fields) if fields else None
        return {
            name: self._record.get(name)
            for name in self.field_names()
            if choices is None or name in choices
        }

    def submitted(self, value: Optional[bool] = None) -> bool:
        """Get, or set and get, whether data was submitted."""
        if isinstance(value, bool):
            self._submitted = value
        return self._submitted

    # =========================================================================
    # Configuration
    # =========================================================================

    def _target(self, field: FieldTarget) -> str:
        if field is True or field == WILDCARD:
            return WILDCARD
        if not isinstance(field, str) or not field:
            raise ConfigurationError(f"Invalid field name {field!r}", field)
        return field

    def _targets(self, fields: Sequence[FieldTarget]) -> List[str]:
        if not fields:
            return [WILDCARD]
        return [self._target(field) for field in fields]

    def _resolve(self, kind: str, spec: Any) -> Definition:
        registry = getattr(self.registries, kind)
        try:
            return registry.resolve(spec)
        except ConfigurationError as exc:
            logger.error("Invalid validator configuration", exception=exc, target=describe(spec))
            raise

    def _bind_rule(self, spec: RuleSpec) -> BoundRule:
        if isinstance(spec, tuple):
            if len(spec) != 2:
                raise ConfigurationError(f"Rule tuple must be (rule, args), got {spec!r}", spec)
            rule, args = spec
            return BoundRule(self._resolve("rules", rule), [str(arg) for arg in args])

        if isinstance(spec, str):
            try:
                name, args = parse_reference(spec)
            except ConfigurationError as exc:
                logger.error("Invalid validator configuration", exception=exc, target=spec)
                raise
            return BoundRule(self._resolve("rules", name), args)

        return BoundRule(self._resolve("rules", spec))

    def allow_empty_rules(self, *rules: str) -> "Validator":
        """Let the named rules run on empty values too."""
        self._empty_rules.extend(rules)
        return self

    def shape(self, field: str, shape: Union[Shape, str]) -> "Validator":
        """
        Declare a field as scalar or sequence.

        A missing sequence field is added to the record as an empty list
        instead of None.
        """
        try:
            self._shapes[self._target(field)] = Shape(shape)
        except ValueError:
            raise ConfigurationError(f"Unknown field shape {shape!r}", shape) from None
        return self

    def pre_filter(self, filter: Any, *fields: FieldTarget) -> "Validator":
        """
        Add a filter applied before rules and callbacks.

        With no fields (or ``True``/``"*"``) the filter applies to every field.
        """
        definition = self._resolve("filters", filter)
        for target in self._targets(fields):
            self._pre_filters.setdefault(target, []).append(definition)
        logger.debug("Pre-filter registered", filter=definition.name, fields=fields or WILDCARD)
        return self

    def post_filter(self, filter: Any, *fields: FieldTarget) -> "Validator":
        """Add a filter applied after rules and callbacks, even on failure."""
        definition = self._resolve("filters", filter)
        for target in self._targets(fields):
            self._post_filters.setdefault(target, []).append(definition)
        logger.debug("Post-filter registered", filter=definition.name, fields=fields or WILDCARD)
        return self

    def add_rules(self, field: FieldTarget, *rules: RuleSpec) -> "Validator":
        """
        Add rules to a field.

        Rules may be names (``"length[4,10]"``), callables, or
        ``(rule, args)`` tuples. They run in the order given.
        """
        target = self._target(field)
        for spec in rules:
            bound = self._bind_rule(spec)
            if bound.name == "is_array":
                self._shapes[target] = Shape.SEQUENCE
            self._rules.setdefault(target, []).append(bound)
            logger.debug("Rule registered", field=target, rule=bound.name, args=bound.args)
        return self

    def add_callbacks(self, field: FieldTarget, *callbacks: Any) -> "Validator":
        """
        Add callbacks to a field.

        Callbacks are called as ``callback(validator, field)`` and report
        failures with add_error(); their return value is ignored.
        """
        target = self._target(field)
        for callback in callbacks:
            definition = self._resolve("callbacks", callback)
            self._callbacks.setdefault(target, []).append(definition)
            logger.debug("Callback registered", field=target, callback=definition.name)
        return self

    def field_names(self) -> List[str]:
        """Fields with at least one filter, rule or callback, wildcard excluded."""
        names = chain(self._pre_filters, self._rules, self._callbacks, self._post_filters)
        return [name for name in unique(names) if name != WILDCARD]

    # =========================================================================
    # Validation
    # =========================================================================

    def _populate(self) -> None:
        for name in self.field_names():
            if self._record.get(name) is None:
                sequence = self._shapes.get(name) is Shape.SEQUENCE
                self._record[name] = [] if sequence else None

    def _apply_filters(self, filters: Dict[str, List[Definition]], fields: List[str]) -> None:
        for target, definitions in filters.items():
            for definition in definitions:
                names = fields if target == WILDCARD else [target]
                for name in names:
                    self._record[name] = map_value(definition.func, self._record.get(name))

    def _call_rule(self, rule: BoundRule, value: Any, context: RuleContext) -> bool:
        func = rule.definition.func
        if rule.definition.contextual:
            return bool(func(value, rule.args or [], context=context))
        if rule.args is None:
            return bool(func(value))
        return bool(func(value, rule.args))

    def _run_rules(self, fields: List[str]) -> None:
        context = RuleContext(
            record=self._record,
            decimal_separator=self.decimal_separator,
            dns_timeout=self.dns_timeout,
        )

        for target, rules in self._rules.items():
            names = fields if target == WILDCARD else [target]
            for rule in rules:
                # A wildcard failure on one field never stops its siblings
                for name in names:
                    if name in self._errors:
                        continue

                    value = self._record.get(name)
                    if is_empty(value) and rule.name not in self._empty_rules:
                        continue

                    if not self._call_rule(rule, value, context):
                        self._errors[name] = rule.name

    def _run_callbacks(self, fields: List[str]) -> None:
        for target, callbacks in self._callbacks.items():
            names = fields if target == WILDCARD else [target]
            for callback in callbacks:
                for name in names:
                    if name in self._errors:
                        continue
                    callback.func(self, name)

    def validate(self) -> bool:
        """
        Run pre-filters, rules, callbacks and post-filters.

        Returns:
            True if no field has an error. Always False when nothing
            was submitted; in that case only pre-filters run.
        """
        self._populate()
        fields = list(self._record)

        self._apply_filters(self._pre_filters, fields)

        if not self._submitted:
            logger.debug("Validation skipped, nothing submitted", fields=len(fields))
            return False

        self._run_rules(fields)
        self._run_callbacks(fields)
        self._apply_filters(self._post_filters, fields)

        success = not self._errors
        logger.debug(
            "Validation finished",
            success=success,
            errors=len(self._errors),
            fields=len(fields),
        )
        return success

    def result(self) -> ValidationResult:
        """Snapshot of the current outcome, record included."""
        return ValidationResult(
            success=self._submitted and not self._errors,
            errors=dict(self._errors),
            record=dict(self._record),
        )

    # =========================================================================
    # Errors and messages
    # =========================================================================

    def add_error(self, field: str, code: str) -> "Validator":
        """Record an error for a field, replacing any earlier one."""
        self._errors[field] = code
        return self

    def errors(self, table: Optional[MessageTable] = None) -> Dict[str, str]:
        """
        Error codes by field, or messages when a table is given.

        Args:
            table: ``{field: {code: message}}``; it must cover every
                field/code pair that can occur

        Raises:
            MessageLookupError: The table lacks an entry
        """
        if table is None:
            return dict(self._errors)
        return lookup_messages(self._errors, table)

    def message(self, field: Optional[str] = None, text: Optional[str] = None) -> Any:
        """
        Set or read free-form messages.

        ``message(field, text)`` sets and returns the validator,
        ``message(field)`` returns that message ("" if unset) and
        ``message()`` returns every message joined by newlines.
        """
        if text is not None:
            if field is None:
                raise ValueError("A field name is required to set a message")
            self._messages[field] = text
            return self

        if field is None:
            return "\n".join(self._messages[name] for name in self._messages)

        return self._messages.get(field, "")

    # =========================================================================
    # Copies
    # =========================================================================

    def _duplicate(self, record: Dict[str, Any], submitted: bool) -> "Validator":
        duplicate = shallow_copy(self)
        duplicate._record = record
        duplicate._submitted = submitted
        duplicate._errors = {}
        duplicate._messages = {}
        return duplicate

    def copy(self, record: Mapping[str, Any]) -> "Validator":
        """
        Same configuration, new record.

        Filters, rules and callbacks are shared with this validator;
        errors and messages start empty.
        """
        record = dict(record)
        return self._duplicate(record, bool(record))

    def clone(self) -> "Validator":
        """Same configuration and record, errors and messages cleared."""
        return self._duplicate(dict(self._record), self._submitted)

    def __repr__(self) -> str:
        return (
            f"<Validator fields={self.field_names()!r} "
            f"submitted={self._submitted} errors={len(self._errors)}>"
        )


# Convenience functions

def validate(
    record: Mapping[str, Any],
    rules: Mapping[str, Union[str, Sequence[RuleSpec]]],
    pre_filters: Sequence[Any] = (),
    **options: Any,
) -> ValidationResult:
    """
    Validate a record in one call.

    Example:
        result = validate(
            {"email": " test@example.com "},
            {"email": "required|email"},
            pre_filters=["trim"],
        )
    """
    validator = Validator.from_rules(record, rules, **options)
    for filter in pre_filters:
        validator.pre_filter(filter)
    validator.validate()
    return validator.result()


def validate_or_fail(
    record: Mapping[str, Any],
    rules: Mapping[str, Union[str, Sequence[RuleSpec]]],
    pre_filters: Sequence[Any] = (),
    **options: Any,
) -> Dict[str, Any]:
    """
    Validate and raise on failure.

    Returns the filtered record if successful.

    Raises:
        ValidationError: If validation fails
    """
    result = validate(record, rules, pre_filters, **options)
    if not result.success:
        raise ValidationError(errors=result.errors)
    return result.record
