"""
Formguard Rule Arguments
========================

Parsing of textual rule references.

A rule reference is a name with an optional bracketed argument list:

    required
    length[4,10]
    chars[a-z,0-9,\\,]

Arguments are separated by commas (whitespace after a comma is dropped).
A backslash escapes a comma or another backslash; any other backslash is
kept as written, so patterns such as ``\\d`` survive unchanged.

Several references can be joined with pipes for the shorthand form
``"required|length[4,10]"``. Pipes inside brackets are part of the
arguments.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from formguard.validation.exceptions import ConfigurationError

_REFERENCE = re.compile(r"^([^\[\]]+)\[(.+)\]$", re.DOTALL)

_ESCAPABLE = {",", "\\"}


def split_arguments(text: str) -> List[str]:
    """
    Split a bracket body into arguments.

    Example:
        >>> split_arguments("4, 10")
        ['4', '10']
        >>> split_arguments("a\\\\,b,c")
        ['a,b', 'c']
    """
    args: List[str] = []
    current: List[str] = []
    index = 0
    size = len(text)

    while index < size:
        char = text[index]

        if char == "\\" and index + 1 < size and text[index + 1] in _ESCAPABLE:
            current.append(text[index + 1])
            index += 2
            continue

        if char == ",":
            args.append("".join(current))
            current = []
            index += 1
            while index < size and text[index].isspace():
                index += 1
            continue

        current.append(char)
        index += 1

    args.append("".join(current))
    return args


def parse_reference(reference: str) -> Tuple[str, Optional[List[str]]]:
    """
    Split a rule reference into its name and arguments.

    Returns ``(name, None)`` when there is no bracketed suffix.

    Raises:
        ConfigurationError: If brackets are present but malformed.
    """
    reference = reference.strip()

    if "[" not in reference and "]" not in reference:
        if not reference:
            raise ConfigurationError("Empty rule reference", reference)
        return reference, None

    match = _REFERENCE.match(reference)
    if match is None:
        raise ConfigurationError(f"Malformed rule reference '{reference}'", reference)

    return match.group(1).strip(), split_arguments(match.group(2))


def split_pipeline(text: str) -> List[str]:
    """
    Split a pipe-joined rule string into individual references.

    Example:
        >>> split_pipeline("required|chars[a,|]|length[2]")
        ['required', 'chars[a,|]', 'length[2]']
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    index = 0

    while index < len(text):
        char = text[index]

        if char == "\\" and index + 1 < len(text):
            # Escapes are resolved later by split_arguments
            current.append(text[index:index + 2])
            index += 2
            continue

        if char == "[":
            depth += 1
        elif char == "]" and depth:
            depth -= 1
        elif char == "|" and depth == 0:
            parts.append("".join(current))
            current = []
            index += 1
            continue

        current.append(char)
        index += 1

    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]
