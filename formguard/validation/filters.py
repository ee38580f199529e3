"""
Formguard Filters
=================

Built-in value transforms for pre- and post-filtering.

A filter takes one scalar and returns the replacement. The validator
applies it element-wise when the field holds a sequence. None becomes
an empty string so that filters can run on fields that were never
submitted.
"""

from __future__ import annotations

import re
from typing import Any

from formguard.security.sanitizer import strip_tags as _strip_tags
from formguard.utils.helpers import to_text
from formguard.validation.registry import default_registries

register = default_registries.filters.register


@register()
def trim(value: Any) -> str:
    return to_text(value).strip()


@register()
def ltrim(value: Any) -> str:
    return to_text(value).lstrip()


@register()
def rtrim(value: Any) -> str:
    return to_text(value).rstrip()


@register()
def lower(value: Any) -> str:
    return to_text(value).lower()


@register()
def upper(value: Any) -> str:
    return to_text(value).upper()


@register()
def ucfirst(value: Any) -> str:
    """Upper-case the first character only."""
    text = to_text(value)
    return text[:1].upper() + text[1:]


@register()
def collapse_whitespace(value: Any) -> str:
    """Trim and squeeze inner whitespace runs to one space."""
    return re.sub(r"\s+", " ", to_text(value)).strip()


@register()
def digits(value: Any) -> str:
    """Keep only the digits, e.g. for phone numbers."""
    return re.sub(r"\D+", "", to_text(value))


@register()
def strip_tags(value: Any) -> str:
    return _strip_tags(to_text(value))
