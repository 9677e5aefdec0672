"""Content-safety lint for string values anywhere in a document.

Responsibilities:
- Flatten every string value of a document tree in document order.
- Flag strings that match obviously dangerous markup patterns.

The scan is a blocklist and only a defense-in-depth layer: passing it does
not make a value safe to embed, so renderers must still escape output.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
import re

from ..models.datatypes import Node


def iter_strings(node: Node | Mapping[str, Node]) -> Iterator[str]:
    """Yield every string value below `node`; map keys are not included."""

    if isinstance(node, str):
        yield node
    elif isinstance(node, Mapping):
        for value in node.values():
            yield from iter_strings(value)
    elif isinstance(node, Sequence):
        for item in node:
            yield from iter_strings(item)


def first_dangerous_match(
    value: str, patterns: Sequence[re.Pattern[str]]
) -> re.Pattern[str] | None:
    """Return the first pattern that matches `value`, in configured order."""

    for pattern in patterns:
        if pattern.search(value):
            return pattern
    return None


def excerpt(value: str, length: int) -> str:
    """Return the leading `length` characters of a value for error messages."""

    return value[:length]
