"""CLI error-handling tests for concise stage diagnostics."""

from __future__ import annotations

import json
from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from devcard.cli import app


def test_validate_command_reports_unreadable_card(tmp_path: Path) -> None:
    """A missing card prints an invalid payload, read-stage diagnostics, and exits 1."""

    runner = CliRunner()

    result = runner.invoke(app, ["validate", str(tmp_path / "@ghost.yaml")])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["valid"] is False
    assert len(payload["errors"]) == 1
    assert payload["errors"][0].startswith("Cannot read file: ")
    assert "validate failed at stage `read`" in result.stderr
    assert "Hint: Verify the card path exists and is UTF-8 text." in result.stderr


def test_parse_command_reports_unreadable_card(tmp_path: Path) -> None:
    """`parse` fails at the read stage without printing a document."""

    runner = CliRunner()

    result = runner.invoke(app, ["parse", str(tmp_path / "@ghost.yaml")])

    assert result.exit_code == 1
    assert result.stdout == ""
    assert "parse failed at stage `read`" in result.stderr


def test_validate_command_reports_missing_schema_file(valid_card_path: Path) -> None:
    """A missing `--schema` file fails at the config stage."""

    runner = CliRunner()

    result = runner.invoke(
        app, ["validate", str(valid_card_path), "--schema", "missing-schema.yaml"]
    )

    assert result.exit_code == 1
    assert "validate failed at stage `config`" in result.output
    assert "Schema file not found" in result.output


def test_schema_command_reports_invalid_schema_file(tmp_path: Path) -> None:
    """Invalid schema values fail at the config stage with the loader message."""

    schema_path = tmp_path / "schema.yml"
    schema_path.write_text("unknown_key: 1\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["schema", "--schema", str(schema_path)])

    assert result.exit_code == 1
    assert "schema failed at stage `config`" in result.output
    assert "unsupported key(s): unknown_key" in result.output


def test_validate_command_reports_bad_schema_environment(
    monkeypatch: MonkeyPatch, valid_card_path: Path, tmp_path: Path
) -> None:
    """A missing `DEVCARD_SCHEMA_CONFIG` file fails at the config stage."""

    monkeypatch.setenv("DEVCARD_SCHEMA_CONFIG", str(tmp_path / "absent.yml"))
    runner = CliRunner()

    result = runner.invoke(app, ["validate", str(valid_card_path)])

    assert result.exit_code == 1
    assert "validate failed at stage `config`" in result.output


def test_validate_command_reports_non_stage_error(
    monkeypatch: MonkeyPatch, valid_card_path: Path
) -> None:
    """Unexpected failures still produce concise diagnostics with exit code 1."""

    def _failing_check(*_: object, **__: object) -> None:
        """Raise a generic error to verify fallback CLI diagnostics."""

        raise RuntimeError("unexpected validator error")

    monkeypatch.setattr("devcard.cli.CardPipeline.check", _failing_check)
    runner = CliRunner()

    result = runner.invoke(app, ["validate", str(valid_card_path)])

    assert result.exit_code == 1
    assert "validate failed: unexpected validator error" in result.output
