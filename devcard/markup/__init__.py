"""Block-markup parsing components.

This package turns human-edited profile text into a read-only document tree
without interpreting field meanings.
"""

from .parser import DANGEROUS_KEYS, parse, parse_document

__all__ = ["DANGEROUS_KEYS", "parse", "parse_document"]
