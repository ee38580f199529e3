"""
Formguard Input Sanitizer
=========================

Cleans raw submissions before they reach a validator.

The engine never sanitizes on its own; form handlers run this first so
that script blocks, style blocks, comments and markup never end up in a
validated record.

Example:
    sanitizer = Sanitizer()
    clean = sanitizer.clean({"name": "<b>Ann</b><script>x()</script>"})
    # {"name": "Ann"}
"""

from __future__ import annotations

import html
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import bleach


@dataclass
class SanitizerConfig:
    """Sanitizer configuration."""

    # Strip null bytes
    strip_null_bytes: bool = True

    # Strip control characters (newlines and tabs are kept)
    strip_control_chars: bool = True

    # Normalize unicode
    normalize_unicode: bool = False

    # Unicode normalization form
    unicode_form: str = "NFKC"

    # Maximum string length, 0 for unlimited
    max_string_length: int = 0


class Sanitizer:
    """
    Removes markup and active content from submitted values.

    Strings are cleaned, lists/tuples and mappings are cleaned
    recursively, everything else is returned unchanged.
    """

    # Blocks whose content must go along with the tags
    SCRIPT_BLOCK = re.compile(r"<script[^>]*?>.*?</script>", re.DOTALL | re.IGNORECASE)
    STYLE_BLOCK = re.compile(r"<style[^>]*?>.*?</style>", re.DOTALL | re.IGNORECASE)
    COMMENT_BLOCK = re.compile(r"<![\s\S]*?--[ \t\n\r]*>")

    CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

    def __init__(self, config: Optional[SanitizerConfig] = None) -> None:
        self.config = config or SanitizerConfig()

    def string(self, value: str) -> str:
        """Clean a single string."""
        result = value

        if self.config.strip_null_bytes:
            result = result.replace("\x00", "")

        if self.config.strip_control_chars:
            result = self.CONTROL_CHARS.sub("", result)

        result = self.SCRIPT_BLOCK.sub("", result)
        result = self.STYLE_BLOCK.sub("", result)
        result = self.COMMENT_BLOCK.sub("", result)
        result = strip_tags(result)

        if self.config.normalize_unicode:
            result = unicodedata.normalize(self.config.unicode_form, result)

        if self.config.max_string_length and len(result) > self.config.max_string_length:
            result = result[:self.config.max_string_length]

        return result

    def clean(self, value: Any) -> Any:
        """Clean a value of any shape."""
        if isinstance(value, str):
            return self.string(value)
        if isinstance(value, Mapping):
            return {key: self.clean(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.clean(item) for item in value]
        return value


def strip_tags(text: str) -> str:
    """
    Remove every HTML tag, keeping the text between them.

    bleach escapes stray ``<``, ``>`` and ``&``; they are turned back into
    plain characters so "R&D" stays "R&D".
    """
    cleaned = bleach.clean(text, tags=set(), attributes={}, strip=True, strip_comments=True)
    return html.unescape(cleaned)


def sanitize(value: Any, config: Optional[SanitizerConfig] = None) -> Any:
    """Shortcut for Sanitizer(config).clean(value)."""
    return Sanitizer(config).clean(value)
