"""Command-line interface for devcard.

Responsibilities:
- Expose user-facing commands for checking, parsing, and inspecting cards.
- Resolve the effective `CardSchema` from CLI and environment sources.
- Keep stdout machine-readable JSON; diagnostics and logs go to stderr.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_json,
    exit_with_command_error,
    parse_payload,
    read_failure_payload,
)
from .config import CardSchema, ConfigLoader
from .errors import CardStageError
from .pipeline import CardCheckResult, CardPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="devcard",
    no_args_is_help=True,
    help="Devcard profile card CLI.",
)

_SCHEMA_OPTION_HELP = (
    "YAML file with schema overrides. Defaults to `DEVCARD_SCHEMA_CONFIG` "
    "or the built-in schema."
)


def _load_schema(schema_path: Path | None) -> CardSchema:
    """Resolve the effective schema and map loader failures to stage errors."""

    try:
        return ConfigLoader.resolve(schema_path)
    except FileNotFoundError as exc:
        raise CardStageError(
            stage="config",
            detail=f"Schema file not found: `{exc.filename or schema_path}`.",
            hint="Provide an existing path via `--schema <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CardStageError(
            stage="config",
            detail=f"Invalid schema file: {exc}",
            hint="Fix schema keys/values and rerun.",
        ) from exc
    except OSError as exc:
        raise CardStageError(
            stage="config",
            detail=f"Failed to load schema file: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _build_pipeline(schema: CardSchema | None, verbose: bool) -> CardPipeline:
    """Create a pipeline, attaching stderr phase logging when requested."""

    return CardPipeline(schema=schema, run_logger=RunLogger() if verbose else None)


def _run_check(command_name: str, card: Path, pipeline: CardPipeline) -> CardCheckResult:
    """Check one card; read failures still print an invalid-card JSON payload."""

    try:
        return pipeline.check(card)
    except CardStageError as exc:
        if exc.stage == "read":
            echo_json(read_failure_payload(exc))
        exit_with_command_error(command_name, exc)
    except Exception as exc:
        exit_with_command_error(command_name, exc)


@app.command("validate")
def validate_command(
    card: Annotated[Path, typer.Argument(help="Path to a card file, e.g. `@octocat.yaml`.")],
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema", help=_SCHEMA_OPTION_HELP),
    ] = None,
    detailed: Annotated[
        bool,
        typer.Option("--detailed", help="Include issue codes and parse warnings."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit phase logs on stderr."),
    ] = False,
) -> None:
    """Validate one card file and print `{valid, errors}` as JSON."""

    try:
        schema = _load_schema(schema_file)
    except Exception as exc:
        exit_with_command_error("validate", exc)

    result = _run_check("validate", card, _build_pipeline(schema, verbose))
    if detailed:
        payload = result.report.as_detailed_payload()
        payload["warnings"] = [
            warning.as_payload() for warning in result.parse_result.warnings
        ]
    else:
        payload = result.report.as_payload()
    echo_json(payload)
    if not result.valid:
        raise typer.Exit(code=1)


@app.command("parse")
def parse_command(
    card: Annotated[Path, typer.Argument(help="Path to a card file.")],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit phase logs on stderr."),
    ] = False,
) -> None:
    """Parse one card file and print the tree with skipped-line warnings."""

    try:
        parse_result = _build_pipeline(None, verbose).parse_file(card)
    except Exception as exc:
        exit_with_command_error("parse", exc)

    echo_json(parse_payload(parse_result))


@app.command("profile")
def profile_command(
    card: Annotated[Path, typer.Argument(help="Path to a card file.")],
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema", help=_SCHEMA_OPTION_HELP),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit phase logs on stderr."),
    ] = False,
) -> None:
    """Print the typed card index entry for a valid card."""

    try:
        schema = _load_schema(schema_file)
    except Exception as exc:
        exit_with_command_error("profile", exc)

    result = _run_check("profile", card, _build_pipeline(schema, verbose))
    if not result.valid:
        echo_json(result.report.as_payload())
        raise typer.Exit(code=1)
    echo_json(result.profile().as_index_entry())


@app.command("schema")
def schema_command(
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema", help=_SCHEMA_OPTION_HELP),
    ] = None,
) -> None:
    """Print the effective validation schema as JSON."""

    try:
        schema = _load_schema(schema_file)
    except Exception as exc:
        exit_with_command_error("schema", exc)

    echo_json(schema.as_payload())


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
