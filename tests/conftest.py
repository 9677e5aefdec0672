"""Shared pytest fixtures for the full devcard test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.fixture_paths import (
    invalid_card_fixture_path as resolve_invalid_card_fixture_path,
    lenient_card_fixture_path as resolve_lenient_card_fixture_path,
    valid_card_fixture_path as resolve_valid_card_fixture_path,
)


@pytest.fixture
def valid_card_path() -> Path:
    """Provide the fixture card that passes validation."""

    return resolve_valid_card_fixture_path()


@pytest.fixture
def invalid_card_path() -> Path:
    """Provide the fixture card with one violation per rule family."""

    return resolve_invalid_card_fixture_path()


@pytest.fixture
def lenient_card_path() -> Path:
    """Provide the fixture card with skipped lines."""

    return resolve_lenient_card_fixture_path()


@pytest.fixture
def valid_card_text(valid_card_path: Path) -> str:
    """Provide the text of the valid fixture card."""

    return valid_card_path.read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolate_schema_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep schema environment overrides from leaking into tests."""

    monkeypatch.delenv("DEVCARD_SCHEMA_CONFIG", raising=False)
    monkeypatch.delenv("DEVCARD_SCHEMA_VERSION", raising=False)
