"""Unit tests for schema validation rules and issue accumulation."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import re

from devcard.config import DEFAULT_SCHEMA
from devcard.markup import parse
from devcard.models.datatypes import Node
from devcard.validation import ProfileValidator, collect_issues, validate

_ORIGIN = "cards/@alice.yaml"


def _valid_document(**overrides: Node) -> dict[str, Node]:
    """Return a minimal document that passes every default rule."""

    document: dict[str, Node] = {
        "schema_version": "1",
        "name": "Alice",
        "title": "Engineer",
        "bio": "Writes parsers.",
        "stack": {"languages": ["Python"]},
        "links": {"github": "https://github.com/alice"},
    }
    document.update(overrides)
    return document


def test_validate_accepts_minimal_valid_document() -> None:
    """A document meeting every rule should produce no errors."""

    assert validate(_valid_document(), _ORIGIN) == []


def test_validate_accepts_parsed_fixture_card(valid_card_text: str) -> None:
    """The shared fixture card should be valid for its own file name."""

    assert validate(parse(valid_card_text), "tests/files/@octocat.yaml") == []


def test_validate_requires_exact_schema_version() -> None:
    """The version marker is compared by strict string equality."""

    assert validate(_valid_document(schema_version="1.0"), _ORIGIN) == [
        'schema_version must be "1", got "1.0"'
    ]
    missing = _valid_document()
    del missing["schema_version"]
    assert validate(missing, _ORIGIN) == ['schema_version must be "1", got "(missing)"']


def test_validate_names_each_missing_required_field() -> None:
    """Missing, blank, or non-string mandatory fields are each reported by name."""

    document = _valid_document(name="   ", title={"nested": "x"})
    del document["bio"]

    assert validate(document, _ORIGIN) == [
        'Required field "name" is missing or empty',
        'Required field "title" is missing or empty',
        'Required field "bio" is missing or empty',
    ]


def test_validate_checks_stack_shape_and_content() -> None:
    """Stack must be a non-empty map of scalars or scalar lists with some technology."""

    assert validate(_valid_document(stack="Python"), _ORIGIN) == [
        'Required field "stack" must be a map with at least one category'
    ]
    assert validate(_valid_document(stack={}), _ORIGIN) == [
        '"stack" must contain at least one category'
    ]
    assert validate(_valid_document(stack={"languages": ["", " "], "db": ""}), _ORIGIN) == [
        '"stack" categories must contain at least one technology'
    ]
    assert validate(
        _valid_document(stack={"languages": "Python", "frontend": {"primary": "React"}}),
        _ORIGIN,
    ) == ["stack.frontend must be a string or array, not an object"]

    parsed = parse("stack:\n  langs:\n    - name: x\n    - Python\n")
    issues = [
        issue
        for issue in collect_issues(parsed, _ORIGIN)
        if issue.path.startswith("stack")
    ]
    assert [(issue.code, issue.path, issue.message) for issue in issues] == [
        ("stack_shape", "stack.langs[0]", "stack.langs[0] must be a string, not an object")
    ]
    assert validate(_valid_document(stack={"tools": [["nested"], "Git"]}), _ORIGIN) == [
        "stack.tools[0] must be a string, not an array"
    ]


def test_validate_requires_github_link() -> None:
    """The required link key must exist with a non-blank value."""

    no_links = _valid_document()
    del no_links["links"]
    assert validate(no_links, _ORIGIN) == [
        'Required field "links.github" is missing (no links section)'
    ]
    assert validate(_valid_document(links={"github": " "}), _ORIGIN) == [
        'Required field "links.github" is missing or empty'
    ]


def test_validate_identity_cross_check_matches_case_insensitively() -> None:
    """The file-name user and link user must agree, ignoring case."""

    assert validate(_valid_document(links={"github": "https://github.com/ALICE/"}), _ORIGIN) == []

    issues = collect_issues(_valid_document(links={"github": "https://github.com/bob"}), _ORIGIN)

    assert [issue.code for issue in issues] == ["identity_mismatch"]
    assert issues[0].message == (
        'Username mismatch: filename says "alice" but links.github points to "bob"'
    )


def test_validate_reports_unparseable_identity_link() -> None:
    """A required link that does not match the profile URL pattern is reported."""

    assert validate(
        _valid_document(links={"github": "https://gitlab.com/alice"}), _ORIGIN
    ) == ['Could not extract username from links.github URL: "https://gitlab.com/alice"']


def test_validate_skips_identity_check_for_unrecognized_origin() -> None:
    """Origins without a username pattern skip only the identity rule."""

    document = _valid_document(links={"github": "https://github.com/bob"})

    assert validate(document, "profile.yaml") == []


def test_validate_checks_link_types_and_scheme() -> None:
    """Link values must be strings starting with `https://`."""

    document = _valid_document(
        links={
            "github": "https://github.com/alice",
            "website": "http://alice.example.com",
            "social": {"x": "https://x.com/alice"},
            "blog": "",
        }
    )

    assert validate(document, _ORIGIN) == [
        'links.website must start with https:// (got "http://alice.example.com")',
        "links.social must be a string URL, not an object",
    ]


def test_validate_length_gate_is_inclusive_at_the_maximum() -> None:
    """A field at its limit passes; one character over fails."""

    limit = DEFAULT_SCHEMA.max_lengths["bio"]

    assert validate(_valid_document(bio="x" * limit), _ORIGIN) == []
    assert validate(_valid_document(bio="x" * (limit + 1)), _ORIGIN) == [
        f'"bio" exceeds max length of {limit} (got {limit + 1})'
    ]


def test_validate_checks_interest_count_and_type() -> None:
    """Interests must be a list with at most the configured number of items."""

    assert validate(_valid_document(interests=[str(i) for i in range(10)]), _ORIGIN) == []
    assert validate(_valid_document(interests=[str(i) for i in range(11)]), _ORIGIN) == [
        '"interests" has 11 items (max 10)'
    ]
    assert validate(_valid_document(interests="chess"), _ORIGIN) == [
        '"interests" must be an array'
    ]


def test_validate_reports_missing_item_fields_per_index() -> None:
    """Every project and experience item is checked for its required sub-fields."""

    document = _valid_document(
        projects=[{"name": "ok"}, {"description": "no name"}, "bare"],
        experience=[{"role": "Dev", "company": " "}],
    )

    assert validate(document, _ORIGIN) == [
        'projects[1] is missing required field "name"',
        'projects[2] is missing required field "name"',
        'experience[0] is missing required field "company"',
    ]


def test_validate_flags_dangerous_content_anywhere_in_tree() -> None:
    """Each dangerous string yields one issue, wherever it sits in the tree."""

    document = _valid_document(
        projects=[{"name": "x", "description": "<img onerror=alert(1)>"}],
        about="Click javascript:void(0)",
    )

    issues = collect_issues(document, _ORIGIN)

    assert [issue.code for issue in issues] == ["dangerous_content", "dangerous_content"]
    assert issues[0].message == (
        'Dangerous content detected: "<img onerror=alert(1)>..." matches <[a-zA-Z]'
    )
    assert issues[1].message == (
        'Dangerous content detected: "Click javascript:void(0)..." matches (?i)javascript\\s*:'
    )


def test_validate_does_not_flag_less_than_without_tag_letter() -> None:
    """A `<` not followed by a letter is not a tag opening."""

    assert validate(_valid_document(bio="I love <3 coding"), _ORIGIN) == []


def test_validate_truncates_dangerous_excerpt() -> None:
    """Offending strings are truncated to the configured excerpt length."""

    value = "<script>" + "a" * 200
    issues = collect_issues(_valid_document(dna=value[:300]), _ORIGIN)

    assert issues[0].message.startswith(f'Dangerous content detected: "{value[:80]}..."')


def test_validate_accumulates_independent_rule_failures(invalid_card_path: Path) -> None:
    """Every rule runs even after earlier rules fail, in rule order."""

    document = parse(invalid_card_path.read_text(encoding="utf-8"))

    issues = collect_issues(document, str(invalid_card_path))

    assert [issue.code for issue in issues] == [
        "schema_version",
        "required_field",
        "stack_shape",
        "stack_empty",
        "identity_mismatch",
        "link_scheme",
        "list_type",
        "item_field",
        "dangerous_content",
    ]
    assert issues[4].message == (
        'Username mismatch: filename says "mallory" but links.github points to "octocat"'
    )


def test_validator_uses_passed_in_schema() -> None:
    """Alternate schemas coexist with the default without shared state."""

    strict = replace(
        DEFAULT_SCHEMA,
        schema_version="2",
        required_fields=("name", "title", "bio", "location"),
        max_list_items={"interests": 1},
        dangerous_patterns=(re.compile(r"forbidden"),),
    )
    document = _valid_document(schema_version="2", interests=["a", "b"], bio="forbidden word")

    assert ProfileValidator(strict).check(document, _ORIGIN).errors == [
        'Required field "location" is missing or empty',
        '"interests" has 2 items (max 1)',
        'Dangerous content detected: "forbidden word..." matches forbidden',
    ]
    assert validate(document, _ORIGIN) == ['schema_version must be "1", got "2"']


def test_validate_does_not_mutate_document() -> None:
    """Validation only reads the document."""

    document = _valid_document(interests="chess")
    snapshot = repr(document)

    validate(document, _ORIGIN)

    assert repr(document) == snapshot


def test_validation_report_payloads() -> None:
    """Reports expose the CI payload and the detailed payload with codes."""

    report = ProfileValidator().check(_valid_document(schema_version="0"), _ORIGIN)

    assert report.valid is False
    assert report.as_payload() == {
        "valid": False,
        "errors": ['schema_version must be "1", got "0"'],
    }
    assert report.as_detailed_payload()["issues"] == [
        {
            "code": "schema_version",
            "message": 'schema_version must be "1", got "0"',
            "path": "schema_version",
        }
    ]
