"""
Formguard Validation Rules
==========================

The built-in rule library.

Every rule is a plain function ``rule(value)`` or ``rule(value, args)``
returning True when the value is acceptable. ``args`` is the list of
strings parsed from a bracketed reference such as ``length[4,10]``.

Rules that need to look at sibling fields (or validator options) are
registered as contextual and receive a keyword ``context``.

Example:
    from formguard.validation import rules

    rules.length("hello", ["4", "10"])    # True
    rules.phone("(555) 123-4567")          # True
    rules.matches("a", ["b"], context=RuleContext({"b": "a"}))  # True
"""

from __future__ import annotations

import ipaddress
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Union
from urllib.parse import urlsplit

from dateutil import parser as date_parser

from formguard.utils.helpers import to_text
from formguard.utils.logger import get_logger
from formguard.validation.registry import default_registries

try:
    import dns.exception
    import dns.resolver
    HAS_DNS = True
except ImportError:
    HAS_DNS = False


logger = get_logger("formguard.rules")

register = default_registries.rules.register

DEFAULT_PHONE_LENGTHS = (7, 10, 11)

# Largest digit count a decimal[...] bound may ask for
_MAX_REPEAT = 65535

_TRUTHY = {"1", "true", "yes", "on", "utf8", "unicode"}


@dataclass(frozen=True)
class RuleContext:
    """
    What a contextual rule can see besides its own value.

    Attributes:
        record: The working record being validated
        decimal_separator: Separator accepted by ``numeric``
        dns_timeout: Lifetime for the MX lookup in ``email_domain``
    """

    record: Mapping[str, Any] = field(default_factory=dict)
    decimal_separator: str = "."
    dns_timeout: Optional[float] = None


def is_sequence(value: Any) -> bool:
    """Sequences are lists and tuples; strings count as scalars."""
    return isinstance(value, (list, tuple))


def is_empty(value: Any) -> bool:
    """Empty means None, "", False or an empty sequence. 0 and "0" are not."""
    if is_sequence(value):
        return len(value) == 0
    return value is None or value is False or (isinstance(value, str) and value == "")


def _flag(args: Optional[Sequence[str]], index: int, default: bool = False) -> bool:
    if not args or len(args) <= index:
        return default
    return str(args[index]).strip().lower() in _TRUTHY


def _strictly_equal(left: Any, right: Any) -> bool:
    return type(left) is type(right) and left == right


def _categories_only(value: str, allowed: Iterable[str], extra: str = "") -> bool:
    """True if every character is in one of the Unicode categories."""
    if not value:
        return False

    allowed = tuple(allowed)
    for char in value:
        if char in extra:
            continue
        category = unicodedata.category(char)
        if category not in allowed and category[0] not in allowed:
            return False
    return True


# =============================================================================
# Presence and relation rules
# =============================================================================

@register()
def required(value: Any) -> bool:
    """Fails on "", None, False and empty sequences."""
    return not is_empty(value)


@register(contextual=True)
def matches(value: Any, fields: Sequence[str], *, context: Optional[RuleContext] = None) -> bool:
    """Value must be strictly equal to every named sibling field."""
    record = context.record if context else {}
    return all(_strictly_equal(value, record.get(name)) for name in fields)


@register(contextual=True)
def depends_on(value: Any, fields: Sequence[str], *, context: Optional[RuleContext] = None) -> bool:
    """Every named sibling field must be present and hold a value."""
    record = context.record if context else {}
    for name in fields:
        if name not in record or record[name] is None or record[name] == "":
            return False
    return True


@register()
def is_array(value: Any) -> bool:
    """Value must be a sequence. Registering it marks the field as one."""
    return is_sequence(value)


# =============================================================================
# String shape rules
# =============================================================================

@register()
def length(value: Any, bounds: Sequence[str]) -> bool:
    """
    Exact length with one bound, inclusive range with two.

    Non-string values always fail.
    """
    if not isinstance(value, str):
        return False

    size = len(value)
    try:
        if len(bounds) > 1:
            return int(bounds[0]) <= size <= int(bounds[1])
        return size == int(bounds[0])
    except (TypeError, ValueError, IndexError):
        return False


def _expand_chars(args: Sequence[str]) -> Set[str]:
    allowed: Set[str] = set()
    for arg in args:
        index = 0
        while index < len(arg):
            if index + 2 < len(arg) and arg[index + 1] == "-":
                start, end = ord(arg[index]), ord(arg[index + 2])
                allowed.update(chr(code) for code in range(start, end + 1))
                index += 3
            else:
                allowed.add(arg[index])
                index += 1
    return allowed


@register()
def chars(value: Any, allowed: Sequence[str]) -> bool:
    """
    Value may only contain the given characters.

    ``a-z`` style ranges are expanded.
    """
    allowed_set = _expand_chars(allowed)
    return all(char in allowed_set for char in to_text(value))


@register()
def alpha(value: Any, args: Optional[Sequence[str]] = None) -> bool:
    """Letters only; pass a truthy first argument for Unicode letters."""
    text = to_text(value)
    if _flag(args, 0):
        return _categories_only(text, ("L",))
    return text.isascii() and text.isalpha()


@register()
def alpha_numeric(value: Any, args: Optional[Sequence[str]] = None) -> bool:
    """Letters and digits only."""
    text = to_text(value)
    if _flag(args, 0):
        return _categories_only(text, ("L", "N"))
    return text.isascii() and text.isalnum()


@register()
def alpha_dash(value: Any, args: Optional[Sequence[str]] = None) -> bool:
    """Letters, digits, dashes and underscores."""
    text = to_text(value)
    if _flag(args, 0):
        return _categories_only(text, ("L", "N"), extra="-_")
    return bool(re.fullmatch(r"[-a-zA-Z0-9_]+", text))


@register()
def digit(value: Any, args: Optional[Sequence[str]] = None) -> bool:
    """Digits only, no signs or separators."""
    text = to_text(value)
    if _flag(args, 0):
        return _categories_only(text, ("N",))
    return bool(re.fullmatch(r"[0-9]+", text))


@register(contextual=True)
def numeric(value: Any, args: Optional[Sequence[str]] = None, *, context: Optional[RuleContext] = None) -> bool:
    """
    Optionally negative number with at most one decimal separator.

    The separator comes from the validator (``"."`` unless configured),
    never from the process locale.
    """
    separator = re.escape(context.decimal_separator if context else ".")
    pattern = rf"-?(?:[0-9]+(?:{separator}[0-9]*)?|{separator}[0-9]+)"
    return bool(re.fullmatch(pattern, to_text(value)))


@register()
def standard_text(value: Any) -> bool:
    """Letters, numbers, whitespace, dashes, underscores and punctuation."""
    return _categories_only(to_text(value), ("L", "N", "Z", "Pc", "Pd", "Po"))


@register()
def decimal(value: Any, format: Optional[Sequence[str]] = None) -> bool:
    """
    Decimal number with a point.

    ``decimal[2]`` fixes two decimal places, ``decimal[4,2]`` fixes four
    integer digits and two decimal places.
    """
    try:
        counts = [int(size) for size in format or ()][:2]
    except ValueError:
        return False
    if any(size < 0 or size > _MAX_REPEAT for size in counts):
        return False

    integer_part, fraction_part = "+", "+"
    if len(counts) > 1:
        integer_part = "{%d}" % counts[0]
        fraction_part = "{%d}" % counts[1]
    elif counts:
        fraction_part = "{%d}" % counts[0]

    return bool(re.fullmatch(rf"[0-9]{integer_part}\.[0-9]{fraction_part}", to_text(value)))


# =============================================================================
# Internet rules
# =============================================================================

_EMAIL_LOCAL = r"[-_a-z0-9'+*$^&%=~!?{}]"

EMAIL_PATTERN = re.compile(
    rf"{_EMAIL_LOCAL}+(?:\.{_EMAIL_LOCAL}+)*"
    r"@(?:(?![-.])[-a-z0-9.]+(?<![-.])\.[a-z]{2,6}|\d{1,3}(?:\.\d{1,3}){3})"
    r"(?::\d+)?",
    re.IGNORECASE,
)


def _rfc822_pattern() -> re.Pattern:
    qtext = r"[^\x0d\x22\x5c\x80-\xff]"
    dtext = r"[^\x0d\x5b-\x5d\x80-\xff]"
    atom = r"[^\x00-\x20\x22\x28\x29\x2c\x2e\x3a-\x3c\x3e\x40\x5b-\x5d\x7f-\xff]+"
    pair = r"\x5c[\x00-\x7f]"

    domain_literal = rf"\x5b(?:{dtext}|{pair})*\x5d"
    quoted_string = rf"\x22(?:{qtext}|{pair})*\x22"
    sub_domain = rf"(?:{atom}|{domain_literal})"
    word = rf"(?:{atom}|{quoted_string})"
    domain = rf"{sub_domain}(?:\x2e{sub_domain})*"
    local_part = rf"{word}(?:\x2e{word})*"
    return re.compile(rf"{local_part}\x40{domain}")


EMAIL_RFC_PATTERN = _rfc822_pattern()


@register()
def email(value: Any) -> bool:
    """Address made of commonly used characters only."""
    return bool(EMAIL_PATTERN.fullmatch(to_text(value)))


@register()
def email_rfc(value: Any) -> bool:
    """
    RFC 822 shaped address.

    Less strict than ``email`` in some places (quoted local parts,
    domain literals) and stricter in others.
    """
    text = to_text(value)
    return text.isascii() and bool(EMAIL_RFC_PATTERN.fullmatch(text))


@register(contextual=True)
def email_domain(value: Any, args: Optional[Sequence[str]] = None, *, context: Optional[RuleContext] = None) -> bool:
    """
    The domain part of the address must have an MX record.

    If DNS lookups are not available the address is considered valid.
    This performs blocking network I/O.
    """
    if not HAS_DNS:
        return True

    domain = re.sub(r"^[^@]+@", "", to_text(value))
    if not domain:
        return False

    lifetime = context.dns_timeout if context else None
    try:
        answer = dns.resolver.resolve(domain, "MX", lifetime=lifetime)
    except dns.exception.DNSException as exc:
        logger.warning("MX lookup failed", domain=domain, error=type(exc).__name__)
        return False

    return len(answer) > 0


_SCHEME = re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*")


@register()
def url(value: Any) -> bool:
    """Syntactically valid absolute URL with a host."""
    text = to_text(value)
    if not text or any(char.isspace() for char in text) or not text.isascii():
        return False

    try:
        parts = urlsplit(text)
        # A malformed port only raises on access
        parts.port
    except ValueError:
        return False

    return bool(_SCHEME.fullmatch(parts.scheme)) and bool(parts.hostname)


def _reserved(address: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    return (
        address.is_reserved
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
    )


@register()
def ip(value: Any, args: Optional[Sequence[str]] = None) -> bool:
    """
    IP address outside reserved ranges.

    Arguments: ``ip[allow_ipv6, allow_private]``, both off by default.
    """
    allow_ipv6 = _flag(args, 0)
    allow_private = _flag(args, 1)

    try:
        if allow_ipv6:
            address = ipaddress.ip_address(to_text(value))
        else:
            address = ipaddress.IPv4Address(to_text(value))
    except ValueError:
        return False

    if _reserved(address):
        return False
    if not allow_private and address.is_private:
        return False
    return True


@register()
def phone(value: Any, lengths: Optional[Sequence[str]] = None) -> bool:
    """
    Digit count check after stripping everything but digits.

    Accepts 7, 10 or 11 digits unless other lengths are given.
    """
    try:
        allowed = [int(size) for size in lengths] if lengths else list(DEFAULT_PHONE_LENGTHS)
    except ValueError:
        return False

    number = re.sub(r"\D+", "", to_text(value))
    return len(number) in allowed


@register()
def date(value: Any) -> bool:
    """String must parse as a date and/or time."""
    text = to_text(value).strip()
    if not text:
        return False
    try:
        date_parser.parse(text)
    except (ValueError, OverflowError):
        return False
    return True


def rule_names() -> List[str]:
    """Names of the built-in rules."""
    return default_registries.rules.names()
