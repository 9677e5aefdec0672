"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation: JSON payloads on stdout
and concise stage diagnostics on stderr.
"""

from __future__ import annotations

import json
from typing import NoReturn

import typer

from .errors import CardStageError
from .models.datatypes import ParseResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CardStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_json(payload: object) -> None:
    """Print one JSON document with stable two-space indentation."""

    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def read_failure_payload(exc: CardStageError) -> dict[str, object]:
    """Return the invalid-card payload reported when a card cannot be read."""

    return {"valid": False, "errors": [exc.detail]}


def parse_payload(parse_result: ParseResult) -> dict[str, object]:
    """Return the parsed tree together with any skipped-line warnings."""

    return {
        "document": parse_result.document.to_dict(),
        "warnings": [warning.as_payload() for warning in parse_result.warnings],
    }
