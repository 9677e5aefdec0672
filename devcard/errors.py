"""Stage-scoped failures that stop a card check before a report exists.

Problems inside a card never raise: the parser records skipped lines and the
validator accumulates issues. Only the surrounding stages fail hard:

- `read`: the card file is missing, unreadable, or not UTF-8 text.
- `parse`: the card content is not text at all.
- `config`: a schema override file is missing or malformed.
"""

from __future__ import annotations


class CardStageError(RuntimeError):
    """A card check could not reach the validate stage.

    Attributes:
        stage: Failing stage name (`read`, `parse`, or `config`).
        detail: Message shown to the user; for `read` it is also the single
            entry of the invalid-card JSON payload.
        hint: Optional next step printed beneath the diagnostics.
    """

    def __init__(self, *, stage: str, detail: str, hint: str | None = None) -> None:
        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
