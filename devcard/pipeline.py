"""Card check orchestration for devcard.

Responsibilities:
- Define the stage order for checking one card file: read, parse, validate.
- Wrap each stage with start/complete/failure telemetry.
- Map I/O failures to stage-scoped errors; parse and validation problems are
  reported as data, never raised.

Key types:
- `CardPipeline`: orchestration facade.
- `CardCheckResult`: immutable record of one card check.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from .config import DEFAULT_SCHEMA, CardSchema
from .errors import CardStageError
from .markup.parser import parse_document
from .models.datatypes import ParseResult, ValidationReport
from .models.profile import Profile
from .telemetry.logger import RunLogger
from .validation.identity import username_from_origin
from .validation.validator import ProfileValidator

_StageResult = TypeVar("_StageResult")


@dataclass(frozen=True, slots=True)
class CardCheckResult:
    """Outcome of checking one card file.

    Attributes:
        path: Card file that was checked.
        username: Owner parsed from the file name, when it matches the origin pattern.
        parse_result: Parsed document and parse warnings.
        report: Validation report for the parsed document.
    """

    path: Path
    username: str | None
    parse_result: ParseResult
    report: ValidationReport

    @property
    def valid(self) -> bool:
        """Return whether the card passed validation."""

        return self.report.valid

    def profile(self) -> Profile:
        """Return the typed profile for a valid card.

        Raises:
            ValueError: If the card failed validation.
        """

        if not self.report.valid:
            raise ValueError(
                f"Card `{self.path}` failed validation with {len(self.report.issues)} issue(s)."
            )
        return Profile.from_document(
            self.parse_result.document, self.username or self.path.stem
        )


class CardPipeline:
    """Coordinate the read, parse, and validate stages for card files."""

    def __init__(
        self,
        schema: CardSchema | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the pipeline with a schema and optional structured logger."""

        self._schema = schema if schema is not None else DEFAULT_SCHEMA
        self._validator = ProfileValidator(self._schema)
        self._run_logger = run_logger

    @property
    def schema(self) -> CardSchema:
        """Schema used by the validate stage."""

        return self._schema

    def parse_file(self, path: Path) -> ParseResult:
        """Read and parse one card file without validating it."""

        text = self._run_stage("read", lambda: self._read(path))
        parse_result = self._run_stage("parse", lambda: self._parse(text, path))
        if self._run_logger is not None:
            for warning in parse_result.warnings:
                self._run_logger.log_parse_warning(warning.line_number, warning.reason)
        return parse_result

    def check(self, path: Path) -> CardCheckResult:
        """Read, parse, and validate one card file."""

        parse_result = self.parse_file(path)
        report = self._run_stage(
            "validate",
            lambda: self._validator.check(parse_result.document, str(path)),
        )
        if self._run_logger is not None:
            self._run_logger.log_validation_summary(len(report.issues))
        return CardCheckResult(
            path=path,
            username=username_from_origin(str(path), self._schema.origin_pattern),
            parse_result=parse_result,
            report=report,
        )

    @staticmethod
    def _read(path: Path) -> str:
        """Read card text, mapping I/O and decoding failures to stage errors."""

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CardStageError(
                stage="read",
                detail=f"Cannot read file: {exc}",
                hint="Verify the card path exists and is UTF-8 text.",
            ) from exc

    @staticmethod
    def _parse(text: str, path: Path) -> ParseResult:
        """Parse card text; only non-text input can fail here."""

        try:
            return parse_document(text)
        except TypeError as exc:
            raise CardStageError(
                stage="parse",
                detail=f"Parse error in `{path}`: {exc}",
            ) from exc

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)
        return result
