"""Shared helpers for resolving test fixture card paths."""

from __future__ import annotations

from pathlib import Path

_FIXTURE_DIR = Path(__file__).resolve().parent / "files"
_VALID_CARD_FIXTURE_NAME = "@octocat.yaml"
_INVALID_CARD_FIXTURE_NAME = "@mallory.yaml"
_LENIENT_CARD_FIXTURE_NAME = "@lenient.yaml"


def valid_card_fixture_path() -> Path:
    """Return the fixture card that passes every default validation rule."""

    return _FIXTURE_DIR / _VALID_CARD_FIXTURE_NAME


def invalid_card_fixture_path() -> Path:
    """Return the fixture card that breaks one rule of each kind."""

    return _FIXTURE_DIR / _INVALID_CARD_FIXTURE_NAME


def lenient_card_fixture_path() -> Path:
    """Return the fixture card containing lines the parser has to skip."""

    return _FIXTURE_DIR / _LENIENT_CARD_FIXTURE_NAME
