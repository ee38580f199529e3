"""
Formguard Configuration Management
==================================

Layered configuration for validator defaults, logging and the form
handlers.

Configuration Loading Priority (highest to lowest):
1. Runtime overrides (``config.set``)
2. Environment variables (FORMGUARD_*)
3. Sources added with ``add_source``
4. Built-in defaults

Environment variables use a double underscore between nesting levels:

    FORMGUARD_VALIDATION__DECIMAL_SEPARATOR=,   -> validation.decimal_separator
    FORMGUARD_LOGGING__LEVEL=debug              -> logging.level

Example:
    config = get_config()
    separator = config.get("validation.decimal_separator", ".")
    config.set("validation.empty_rules", ["required", "matches", "depends_on"])
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

T = TypeVar("T")

ENV_PREFIX = "FORMGUARD_"

DEFAULTS: Dict[str, Any] = {
    "validation": {
        "decimal_separator": ".",
        "empty_rules": ["required", "matches"],
        "dns_timeout": 5.0,
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
    "forms": {
        "mail_failed": "An unknown error has occurred while sending your message",
        "form_error": "The following errors were encountered: {errors}",
        "form_success": "Thank you! Your message has been sent, we'll get back to you shortly.",
        "error_separator": "; ",
    },
}


@dataclass
class ConfigSource:
    """Represents a configuration source with priority."""
    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Configuration container.

    Provides hierarchical configuration access with type coercion
    and default values. Configuration values can be nested using
    dot notation.

    Example:
        config = Config()
        config.set("validation.decimal_separator", ",")

        config.get("validation.decimal_separator")  # ","
        config.get("validation.missing", "default")  # "default"
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._sources: List[ConfigSource] = []
        self._cache: Dict[str, Any] = {}
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        self.add_source("defaults", _deep_copy(defaults if defaults is not None else DEFAULTS), priority=0)
        self.load_env(environ if environ is not None else os.environ)

    def load_env(self, environ: Mapping[str, str]) -> None:
        """Load overrides from FORMGUARD_* environment variables."""
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                # FORMGUARD_VALIDATION__DECIMAL_SEPARATOR -> validation.decimal_separator
                config_key = ".".join(
                    part.lower() for part in key[len(ENV_PREFIX):].split("__")
                )
                overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env_vars", self._unflatten(overrides), priority=100)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # JSON (for lists and tables)
        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _unflatten(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Convert flat dot-notation keys to nested dict."""
        result: Dict[str, Any] = {}

        for key, value in flat.items():
            parts = key.split(".")
            current = result

            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

        return result

    def add_source(
        self,
        name: str,
        data: Dict[str, Any],
        priority: int = 50,
    ) -> None:
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True
        self._cache.clear()

    def _merge(self) -> None:
        """Merge all sources into single configuration."""
        if not self._dirty:
            return

        # Lower priority first, so higher overrides
        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, _deep_copy(source.data))

        self._dirty = False
        self._cache.clear()

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(
        self,
        key: str,
        default: T = None,
    ) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "validation.decimal_separator")
            default: Default value if key not found
        """
        self._merge()

        if key in self._cache:
            return self._cache[key]

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        self._cache[key] = current
        return current

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get configuration value as float."""
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get configuration value as list; comma-separated strings are split."""
        value = self.get(key, default)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return list(value)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [value]

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime configuration value.

        Runtime values have the highest priority.
        """
        runtime_source = next(
            (source for source in self._sources if source.name == "runtime"),
            None,
        )
        if runtime_source is None:
            runtime_source = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime_source)

        parts = key.split(".")
        current = runtime_source.data
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

        self._dirty = True
        self._cache.clear()

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get all values under a prefix."""
        value = self.get(prefix)
        if isinstance(value, dict):
            return _deep_copy(value)
        return {}


def _deep_copy(data: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            result[key] = _deep_copy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config(config: Optional[Config] = None) -> Config:
    """Replace the global configuration (re-reads the environment)."""
    global _config
    _config = config or Config()
    return _config
