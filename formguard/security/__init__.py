"""
Formguard Security Module
=========================

Input sanitization applied to raw submissions before validation.
"""

from formguard.security.sanitizer import Sanitizer, SanitizerConfig, sanitize, strip_tags

__all__ = [
    "Sanitizer",
    "SanitizerConfig",
    "sanitize",
    "strip_tags",
]
