"""Typed profile records built from validated documents.

Responsibilities:
- Read optional fields with permissive defaults exactly once.
- Hand renderers and index builders an explicit field set instead of a raw tree.

Key types:
- `Profile`, `Project`, and `Experience`.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from dataclasses import dataclass, field
from urllib.parse import quote

from .datatypes import Node


@dataclass(frozen=True, slots=True)
class Project:
    """One showcased project.

    Attributes:
        name: Project name.
        description: Optional one-line description.
        status: Optional status tag such as `active` or `shipped`.
    """

    name: str
    description: str = ""
    status: str = ""


@dataclass(frozen=True, slots=True)
class Experience:
    """One experience entry."""

    role: str
    company: str
    period: str = ""
    highlight: str = ""


@dataclass(frozen=True, slots=True)
class Profile:
    """Typed view of one validated devcard.

    Attributes:
        username: Card owner, taken from the card file name.
        name: Display name, falling back to `username`.
        stack: Category name to technology items, in document order.
        repo_count: Public repository count, `0` when absent or not numeric.
        claude: Optional opaque map of assistant-generated metadata.
    """

    username: str
    name: str
    title: str = ""
    location: str = ""
    archetype: str = ""
    bio: str = ""
    dna: str = ""
    next_project: str = ""
    about: str = ""
    stack: dict[str, tuple[str, ...]] = field(default_factory=dict)
    interests: tuple[str, ...] = ()
    projects: tuple[Project, ...] = ()
    experience: tuple[Experience, ...] = ()
    repo_count: int = 0
    links: dict[str, str] = field(default_factory=dict)
    private_note: str = ""
    claude: dict[str, Node] | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_document(cls, document: Mapping[str, Node], username: str) -> Profile:
        """Build a profile from a document, defaulting every missing optional field."""

        claude = document.get("claude")
        return cls(
            username=username,
            name=_text(document, "name") or username,
            title=_text(document, "title"),
            location=_text(document, "location"),
            archetype=_text(document, "archetype"),
            bio=_text(document, "bio"),
            dna=_text(document, "dna"),
            next_project=_text(document, "next_project"),
            about=_text(document, "about"),
            stack=_stack(document.get("stack")),
            interests=tuple(_strings(document.get("interests"))),
            projects=tuple(
                Project(
                    name=_text(item, "name"),
                    description=_text(item, "description"),
                    status=_text(item, "status"),
                )
                for item in _maps(document.get("projects"))
            ),
            experience=tuple(
                Experience(
                    role=_text(item, "role"),
                    company=_text(item, "company"),
                    period=_text(item, "period"),
                    highlight=_text(item, "highlight"),
                )
                for item in _maps(document.get("experience"))
            ),
            repo_count=_count(document.get("repo_count")),
            links={
                label: url
                for label, url in _mapping(document.get("links")).items()
                if isinstance(url, str)
            },
            private_note=_text(document, "private_note"),
            claude=copy.deepcopy(dict(claude)) if isinstance(claude, Mapping) else None,
            created_at=_text(document, "created_at"),
            updated_at=_text(document, "updated_at"),
        )

    @property
    def url(self) -> str:
        """Relative card page URL."""

        return f"cards/{quote(self.username, safe='')}/"

    def as_index_entry(self) -> dict[str, object]:
        """Return the JSON-serializable card index entry."""

        return {
            "username": self.username,
            "name": self.name,
            "title": self.title,
            "location": self.location,
            "archetype": self.archetype,
            "bio": self.bio,
            "dna": self.dna,
            "next_project": self.next_project,
            "about": self.about,
            "stack": {category: list(items) for category, items in self.stack.items()},
            "interests": list(self.interests),
            "projects": [
                {"name": item.name, "description": item.description, "status": item.status}
                for item in self.projects
            ],
            "experience": [
                {
                    "role": item.role,
                    "company": item.company,
                    "period": item.period,
                    "highlight": item.highlight,
                }
                for item in self.experience
            ],
            "repo_count": self.repo_count,
            "links": dict(self.links),
            "private_note": self.private_note,
            "claude": copy.deepcopy(self.claude),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "url": self.url,
        }


def _text(mapping: Mapping[str, Node], key: str) -> str:
    """Return a string field or an empty string for missing/non-string values."""

    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def _mapping(value: Node | None) -> Mapping[str, Node]:
    """Return `value` when it is a map, else an empty map."""

    return value if isinstance(value, Mapping) else {}


def _strings(value: Node | None) -> list[str]:
    """Return the non-blank string items of a list node."""

    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def _maps(value: Node | None) -> list[Mapping[str, Node]]:
    """Return the map items of a list node."""

    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _stack(value: Node | None) -> dict[str, tuple[str, ...]]:
    """Normalize stack categories to tuples; scalar categories become one item."""

    stack: dict[str, tuple[str, ...]] = {}
    for category, techs in _mapping(value).items():
        if isinstance(techs, list):
            stack[category] = tuple(_strings(techs))
        elif isinstance(techs, str) and techs.strip():
            stack[category] = (techs,)
        else:
            stack[category] = ()
    return stack


def _count(value: Node | None) -> int:
    """Parse a non-negative integer count; fractional, negative, or non-numeric text is `0`."""

    if not isinstance(value, str):
        return 0
    try:
        parsed = int(value.strip())
    except ValueError:
        return 0
    return max(parsed, 0)
