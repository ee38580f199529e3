"""
Formguard Registries
====================

Explicit name -> callable lookup for rules, filters and callbacks.

Names are resolved when a validator is configured, so an unknown name
fails at registration with a ConfigurationError instead of surfacing
halfway through a validation run.

Example:
    from formguard.validation.registry import default_registries

    @default_registries.rules.register("postcode")
    def postcode(value):
        return bool(re.fullmatch(r"\\d{5}", str(value)))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Union

from formguard.validation.exceptions import ConfigurationError, describe


@dataclass(frozen=True)
class Definition:
    """
    A resolved filter, rule or callback.

    Attributes:
        name: Name used for error codes and empty-rule exemptions
        func: The callable itself
        contextual: Rule receives a ``context`` keyword (record access)
    """

    name: str
    func: Callable[..., Any]
    contextual: bool = False


class Registry:
    """
    Named callables of one kind.

    Example:
        filters = Registry("filter")
        filters.add("trim", str.strip)
        filters.resolve("trim").func("  x ")  # "x"
    """

    def __init__(self, kind: str, entries: Optional[Dict[str, Definition]] = None) -> None:
        self.kind = kind
        self._entries: Dict[str, Definition] = dict(entries or {})

    def add(
        self,
        name: str,
        func: Callable[..., Any],
        contextual: bool = False,
    ) -> Definition:
        """Register a callable under a name, replacing any previous one."""
        if not callable(func):
            raise ConfigurationError(
                f"{self.kind.capitalize()} '{name}' is not callable", func
            )
        definition = Definition(name=name, func=func, contextual=contextual)
        self._entries[name] = definition
        return definition

    def register(
        self,
        name: Optional[str] = None,
        contextual: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of add()."""
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add(name or func.__name__, func, contextual)
            return func
        return decorator

    def resolve(self, spec: Union[str, Callable[..., Any], Definition]) -> Definition:
        """
        Turn a name or callable into a Definition.

        Raises:
            ConfigurationError: Unknown name or non-callable value
        """
        if isinstance(spec, Definition):
            return spec

        if isinstance(spec, str):
            definition = self._entries.get(spec)
            if definition is None:
                raise ConfigurationError(
                    f"{self.kind.capitalize()} '{spec}' used for validation is not registered",
                    spec,
                )
            return definition

        if callable(spec):
            registered = self._find(spec)
            if registered is not None:
                return registered
            return Definition(name=getattr(spec, "__name__", describe(spec)), func=spec)

        raise ConfigurationError(
            f"{self.kind.capitalize()} {describe(spec)} used for validation is not callable",
            spec,
        )

    def _find(self, func: Callable[..., Any]) -> Optional[Definition]:
        for definition in self._entries.values():
            if definition.func is func:
                return definition
        return None

    def names(self) -> list:
        """Registered names in registration order."""
        return list(self._entries)

    def copy(self) -> "Registry":
        return Registry(self.kind, self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class Registries:
    """The three registries a validator resolves against."""

    rules: Registry = field(default_factory=lambda: Registry("rule"))
    filters: Registry = field(default_factory=lambda: Registry("filter"))
    callbacks: Registry = field(default_factory=lambda: Registry("callback"))

    def copy(self) -> "Registries":
        """Independent bundle, so local registrations stay local."""
        return Registries(
            rules=self.rules.copy(),
            filters=self.filters.copy(),
            callbacks=self.callbacks.copy(),
        )


# Built-in library; populated by the rules, filters and callbacks modules
default_registries = Registries()


def get_registries() -> Registries:
    """Return the default registries with the built-in library loaded."""
    # Importing the library modules registers their functions
    from formguard.validation import callbacks, filters, rules  # noqa: F401

    return default_registries
