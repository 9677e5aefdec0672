"""Top-level package for devcard.

This package parses and validates developer profile cards written in a small
indentation-based YAML subset. The main entry points are `parse` for turning
card text into a `Document` and `validate` for checking it against a schema.
"""

from .markup import parse, parse_document
from .pipeline import CardPipeline
from .validation import ProfileValidator, collect_issues, validate

__all__ = [
    "CardPipeline",
    "ProfileValidator",
    "__version__",
    "collect_issues",
    "parse",
    "parse_document",
    "validate",
]

__version__ = "0.1.0"
