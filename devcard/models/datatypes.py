"""Core datatypes shared across devcard modules.

Responsibilities:
- Represent the parsed document tree and its read-only root.
- Carry parse diagnostics and validation issues as immutable records.

Key types:
- `Node`, `Document`, `ParseWarning`, `ParseResult`, `ValidationIssue`,
  and `ValidationReport`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import copy
from dataclasses import dataclass
from typing import Union

Node = Union[str, list["Node"], dict[str, "Node"]]


class Document(Mapping[str, Node]):
    """Read-only root map produced by one parse call.

    The document exposes the mapping protocol only; there is no mutation API.
    Use `to_dict` for a detached deep copy suitable for serialization.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Node] | None = None) -> None:
        """Wrap root fields in insertion order."""

        self._fields: dict[str, Node] = dict(fields or {})

    def __getitem__(self, key: str) -> Node:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Document({self._fields!r})"

    def to_dict(self) -> dict[str, Node]:
        """Return a detached deep copy of the document tree."""

        return copy.deepcopy(self._fields)


@dataclass(frozen=True, slots=True)
class ParseWarning:
    """One line the lenient parser skipped or reinterpreted.

    Attributes:
        line_number: 1-based line number in the source text.
        reason: Short human-readable reason.
        text: Offending line content with surrounding whitespace removed.
    """

    line_number: int
    reason: str
    text: str

    def as_payload(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""

        return {"line": self.line_number, "reason": self.reason, "text": self.text}


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Parsed document plus the warnings collected while parsing it."""

    document: Document
    warnings: tuple[ParseWarning, ...] = ()


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One validation failure.

    Attributes:
        code: Stable machine-readable rule tag, e.g. `required_field`.
        message: Human-readable error message.
        path: Dotted field path the issue refers to, or an empty string.
    """

    code: str
    message: str
    path: str = ""

    def as_payload(self) -> dict[str, str]:
        """Return a JSON-serializable representation."""

        return {"code": self.code, "message": self.message, "path": self.path}


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Ordered validation issues for one document."""

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        """Return whether the document passed every rule."""

        return not self.issues

    @property
    def errors(self) -> list[str]:
        """Return issue messages in rule order."""

        return [issue.message for issue in self.issues]

    def as_payload(self) -> dict[str, object]:
        """Return the `{valid, errors}` payload consumed by CI tooling."""

        return {"valid": self.valid, "errors": self.errors}

    def as_detailed_payload(self) -> dict[str, object]:
        """Return the `{valid, errors}` payload extended with tagged issues."""

        payload = self.as_payload()
        payload["issues"] = [issue.as_payload() for issue in self.issues]
        return payload
