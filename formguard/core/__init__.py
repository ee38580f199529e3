"""
Formguard Core
==============

Configuration shared by the validation engine and form handlers.
"""

from formguard.core.config import Config, get_config, reset_config

__all__ = [
    "Config",
    "get_config",
    "reset_config",
]
