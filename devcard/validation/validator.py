"""Schema validation for parsed devcard documents.

Responsibilities:
- Check a parsed `Document` against a `CardSchema` without mutating it.
- Run every rule independently and accumulate all issues in rule order.
- Tag each issue with a stable code next to its human-readable message.

Key public functions:
- `validate`: return error message strings (valid when empty).
- `collect_issues`: return tagged `ValidationIssue` records.
"""

from __future__ import annotations

from collections.abc import Mapping

from ..config import DEFAULT_SCHEMA, CardSchema, describe_pattern
from ..models.datatypes import Node, ValidationIssue, ValidationReport
from ..parsing import normalize_optional_string
from .identity import username_from_link, username_from_origin, usernames_match
from .safety import excerpt, first_dangerous_match, iter_strings

CODE_SCHEMA_VERSION = "schema_version"
CODE_REQUIRED_FIELD = "required_field"
CODE_STACK_SHAPE = "stack_shape"
CODE_STACK_EMPTY = "stack_empty"
CODE_REQUIRED_LINK = "required_link"
CODE_IDENTITY_MISMATCH = "identity_mismatch"
CODE_IDENTITY_UNPARSEABLE = "identity_unparseable"
CODE_LINK_TYPE = "link_type"
CODE_LINK_SCHEME = "link_scheme"
CODE_MAX_LENGTH = "max_length"
CODE_LIST_TYPE = "list_type"
CODE_MAX_ITEMS = "max_items"
CODE_ITEM_FIELD = "item_field"
CODE_DANGEROUS_CONTENT = "dangerous_content"

_STACK_FIELD = "stack"
_LINKS_FIELD = "links"


class ProfileValidator:
    """Validate documents against one schema; safe to share between calls."""

    def __init__(self, schema: CardSchema | None = None) -> None:
        """Bind the validator to a schema, defaulting to `DEFAULT_SCHEMA`."""

        self.schema = schema if schema is not None else DEFAULT_SCHEMA

    def check(self, document: Mapping[str, Node], origin: str) -> ValidationReport:
        """Run all rules and return the ordered report.

        Args:
            document: Parsed document root.
            origin: Identifier of the source, normally the card file path.

        Returns:
            Report whose issues appear in rule order.
        """

        issues: list[ValidationIssue] = []
        self._check_schema_version(document, issues)
        self._check_required_fields(document, issues)
        self._check_stack(document, issues)
        self._check_required_link(document, issues)
        self._check_identity(document, origin, issues)
        self._check_link_values(document, issues)
        self._check_max_lengths(document, issues)
        self._check_list_sizes(document, issues)
        self._check_item_fields(document, issues)
        self._check_content_safety(document, issues)
        return ValidationReport(issues=tuple(issues))

    def _check_schema_version(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Require the exact expected schema version string."""

        value = document.get("schema_version")
        if value == self.schema.schema_version:
            return
        shown = "(missing)" if value is None else _describe_value(value)
        issues.append(
            ValidationIssue(
                code=CODE_SCHEMA_VERSION,
                message=f'schema_version must be "{self.schema.schema_version}", got "{shown}"',
                path="schema_version",
            )
        )

    def _check_required_fields(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Require non-blank string values for every mandatory scalar field."""

        for field_name in self.schema.required_fields:
            if _non_blank_string(document.get(field_name)) is None:
                issues.append(
                    ValidationIssue(
                        code=CODE_REQUIRED_FIELD,
                        message=f'Required field "{field_name}" is missing or empty',
                        path=field_name,
                    )
                )

    def _check_stack(self, document: Mapping[str, Node], issues: list[ValidationIssue]) -> None:
        """Require a non-empty map of scalar or list-of-scalar categories."""

        stack = document.get(_STACK_FIELD)
        if not isinstance(stack, Mapping):
            issues.append(
                ValidationIssue(
                    code=CODE_REQUIRED_FIELD,
                    message='Required field "stack" must be a map with at least one category',
                    path=_STACK_FIELD,
                )
            )
            return
        if not stack:
            issues.append(
                ValidationIssue(
                    code=CODE_STACK_EMPTY,
                    message='"stack" must contain at least one category',
                    path=_STACK_FIELD,
                )
            )
            return

        has_items = False
        for category, techs in stack.items():
            if isinstance(techs, Mapping):
                issues.append(
                    ValidationIssue(
                        code=CODE_STACK_SHAPE,
                        message=f"stack.{category} must be a string or array, not an object",
                        path=f"{_STACK_FIELD}.{category}",
                    )
                )
                continue
            if isinstance(techs, list):
                for index, item in enumerate(techs):
                    if isinstance(item, str):
                        continue
                    kind = "an object" if isinstance(item, Mapping) else "an array"
                    issues.append(
                        ValidationIssue(
                            code=CODE_STACK_SHAPE,
                            message=f"stack.{category}[{index}] must be a string, not {kind}",
                            path=f"{_STACK_FIELD}.{category}[{index}]",
                        )
                    )
                has_items = has_items or any(
                    _non_blank_string(item) is not None for item in techs
                )
            else:
                has_items = has_items or _non_blank_string(techs) is not None

        if not has_items:
            issues.append(
                ValidationIssue(
                    code=CODE_STACK_EMPTY,
                    message='"stack" categories must contain at least one technology',
                    path=_STACK_FIELD,
                )
            )

    def _check_required_link(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Require the configured link key with a non-blank string value."""

        link_key = self.schema.required_link
        path = f"{_LINKS_FIELD}.{link_key}"
        links = document.get(_LINKS_FIELD)
        if not isinstance(links, Mapping):
            issues.append(
                ValidationIssue(
                    code=CODE_REQUIRED_LINK,
                    message=f'Required field "{path}" is missing (no links section)',
                    path=path,
                )
            )
        elif _non_blank_string(links.get(link_key)) is None:
            issues.append(
                ValidationIssue(
                    code=CODE_REQUIRED_LINK,
                    message=f'Required field "{path}" is missing or empty',
                    path=path,
                )
            )

    def _check_identity(
        self, document: Mapping[str, Node], origin: str, issues: list[ValidationIssue]
    ) -> None:
        """Tie the origin file name's username to the required link's username."""

        origin_user = username_from_origin(origin, self.schema.origin_pattern)
        links = document.get(_LINKS_FIELD)
        if origin_user is None or not isinstance(links, Mapping):
            return

        link_key = self.schema.required_link
        url = _non_blank_string(links.get(link_key))
        if url is None:
            return

        link_user = username_from_link(url, self.schema.identity_link_pattern)
        if link_user is None:
            issues.append(
                ValidationIssue(
                    code=CODE_IDENTITY_UNPARSEABLE,
                    message=(
                        f"Could not extract username from {_LINKS_FIELD}.{link_key} "
                        f'URL: "{url}"'
                    ),
                    path=f"{_LINKS_FIELD}.{link_key}",
                )
            )
        elif not usernames_match(origin_user, link_user):
            issues.append(
                ValidationIssue(
                    code=CODE_IDENTITY_MISMATCH,
                    message=(
                        f'Username mismatch: filename says "{origin_user}" but '
                        f'{_LINKS_FIELD}.{link_key} points to "{link_user}"'
                    ),
                    path=f"{_LINKS_FIELD}.{link_key}",
                )
            )

    def _check_link_values(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Require string link values that use the secure scheme."""

        links = document.get(_LINKS_FIELD)
        if not isinstance(links, Mapping):
            return

        scheme = self.schema.secure_scheme
        for label, url in links.items():
            path = f"{_LINKS_FIELD}.{label}"
            if not isinstance(url, str):
                issues.append(
                    ValidationIssue(
                        code=CODE_LINK_TYPE,
                        message=f"{path} must be a string URL, not an object",
                        path=path,
                    )
                )
            elif url.strip() and not url.startswith(scheme):
                issues.append(
                    ValidationIssue(
                        code=CODE_LINK_SCHEME,
                        message=f'{path} must start with {scheme} (got "{url}")',
                        path=path,
                    )
                )

    def _check_max_lengths(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Enforce per-field character limits on narrative scalars."""

        for field_name, limit in self.schema.max_lengths.items():
            value = document.get(field_name)
            if isinstance(value, str) and len(value) > limit:
                issues.append(
                    ValidationIssue(
                        code=CODE_MAX_LENGTH,
                        message=(
                            f'"{field_name}" exceeds max length of {limit} '
                            f"(got {len(value)})"
                        ),
                        path=field_name,
                    )
                )

    def _check_list_sizes(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Enforce list shape and item-count limits on optional list fields."""

        for field_name, limit in self.schema.max_list_items.items():
            if field_name not in document:
                continue
            value = document[field_name]
            if not isinstance(value, list):
                issues.append(_list_type_issue(field_name))
            elif len(value) > limit:
                issues.append(
                    ValidationIssue(
                        code=CODE_MAX_ITEMS,
                        message=f'"{field_name}" has {len(value)} items (max {limit})',
                        path=field_name,
                    )
                )

    def _check_item_fields(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Require non-blank sub-fields on every item of object-list fields."""

        for field_name, required in self.schema.required_item_fields.items():
            if field_name not in document:
                continue
            value = document[field_name]
            if not isinstance(value, list):
                issues.append(_list_type_issue(field_name))
                continue
            for index, item in enumerate(value):
                for sub_field in required:
                    sub_value = item.get(sub_field) if isinstance(item, Mapping) else None
                    if _non_blank_string(sub_value) is None:
                        issues.append(
                            ValidationIssue(
                                code=CODE_ITEM_FIELD,
                                message=(
                                    f"{field_name}[{index}] is missing required "
                                    f'field "{sub_field}"'
                                ),
                                path=f"{field_name}[{index}].{sub_field}",
                            )
                        )

    def _check_content_safety(
        self, document: Mapping[str, Node], issues: list[ValidationIssue]
    ) -> None:
        """Flag each string value matching a dangerous pattern, once per string."""

        for value in iter_strings(document):
            pattern = first_dangerous_match(value, self.schema.dangerous_patterns)
            if pattern is None:
                continue
            issues.append(
                ValidationIssue(
                    code=CODE_DANGEROUS_CONTENT,
                    message=(
                        "Dangerous content detected: "
                        f'"{excerpt(value, self.schema.excerpt_length)}..." '
                        f"matches {describe_pattern(pattern)}"
                    ),
                )
            )


def collect_issues(
    document: Mapping[str, Node], origin: str, schema: CardSchema | None = None
) -> list[ValidationIssue]:
    """Return every tagged issue for a document, in rule order."""

    return list(ProfileValidator(schema).check(document, origin).issues)


def validate(
    document: Mapping[str, Node], origin: str, schema: CardSchema | None = None
) -> list[str]:
    """Return error messages for a document; an empty list means it is valid."""

    return ProfileValidator(schema).check(document, origin).errors


def _non_blank_string(value: object) -> str | None:
    """Return a string value when it is non-blank after trimming."""

    if not isinstance(value, str):
        return None
    if normalize_optional_string(value) is None:
        return None
    return value


def _describe_value(value: Node) -> str:
    """Render a node briefly for error messages."""

    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "(map)"
    return "(list)"


def _list_type_issue(field_name: str) -> ValidationIssue:
    """Build the issue reported when an optional list field is not a list."""

    return ValidationIssue(
        code=CODE_LIST_TYPE,
        message=f'"{field_name}" must be an array',
        path=field_name,
    )
