"""Shared typed data models for devcard.

This package contains the document tree, diagnostics records, and the typed
profile boundary used across parser, validator, and CLI modules.
"""

from .datatypes import (
    Document,
    Node,
    ParseResult,
    ParseWarning,
    ValidationIssue,
    ValidationReport,
)
from .profile import Experience, Profile, Project

__all__ = [
    "Document",
    "Experience",
    "Node",
    "ParseResult",
    "ParseWarning",
    "Profile",
    "Project",
    "ValidationIssue",
    "ValidationReport",
]
