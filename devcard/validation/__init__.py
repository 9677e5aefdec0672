"""Schema validation components for parsed devcard documents.

This package checks structure, limits, identity, and content safety, and
reports every problem as an accumulated, tagged issue.
"""

from .validator import ProfileValidator, collect_issues, validate

__all__ = ["ProfileValidator", "collect_issues", "validate"]
