"""
Formguard Utils Package
=======================

Logging and collection helpers.
"""

from __future__ import annotations

from formguard.utils.logger import Logger, LogLevel, get_logger, configure_logging
from formguard.utils.helpers import map_value, to_text, unique

__all__ = [
    # Logging
    "Logger",
    "LogLevel",
    "get_logger",
    "configure_logging",
    # Collection helpers
    "map_value",
    "to_text",
    "unique",
]
