"""
Formguard Helpers
=================

Small collection helpers shared by the engine.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


def unique(
    items: Iterable[T],
    key: Optional[Callable[[T], Any]] = None,
) -> List[T]:
    """
    Get unique items preserving order.

    Args:
        items: Input iterable
        key: Optional key function

    Returns:
        List of unique items

    Example:
        >>> unique([1, 2, 1, 3, 2])
        [1, 2, 3]
    """
    seen = set()
    result = []

    for item in items:
        k = key(item) if key else item
        if k not in seen:
            seen.add(k)
            result.append(item)

    return result


def map_value(func: Callable[[Any], Any], value: Any) -> Any:
    """
    Apply a transform to a scalar, or element-wise to a list/tuple.

    Sequences come back as lists.

    Example:
        >>> map_value(str.upper, ["a", "b"])
        ['A', 'B']
    """
    if isinstance(value, (list, tuple)):
        return [func(item) for item in value]
    return func(value)


def to_text(value: Any) -> str:
    """
    String form of a submitted scalar.

    None and False become "", True becomes "1".
    """
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)
