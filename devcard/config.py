"""Schema configuration model and loaders for devcard validation.

Responsibilities:
- Define the validator's fixed configuration surface as a typed dataclass.
- Provide loader entry points for file- and environment-based overrides.
- Keep schemas as passed-in values so several versions can coexist.

Key types:
- `CardSchema`: required fields, limits, identity patterns, and content-safety patterns.
- `DEFAULT_SCHEMA`: the schema used when no override is supplied.
- `ConfigLoader`: static construction helpers for `CardSchema`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
import re
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string


_DEFAULT_MAX_LENGTHS = {
    "name": 100,
    "title": 200,
    "bio": 500,
    "dna": 300,
    "about": 2000,
    "private_note": 300,
}
_DEFAULT_MAX_LIST_ITEMS = {"interests": 10}
_DEFAULT_REQUIRED_ITEM_FIELDS = {
    "projects": ("name",),
    "experience": ("role", "company"),
}
_DEFAULT_DANGEROUS_PATTERNS = (
    re.compile(r"<[a-zA-Z]"),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"data\s*:\s*text/html", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
)


@dataclass(frozen=True, slots=True)
class CardSchema:
    """Validation rules for one devcard schema version.

    Attributes:
        schema_version: Exact value the `schema_version` field must hold.
        required_fields: Scalar fields that must be present and non-blank.
        required_link: Key under `links` that must hold a non-blank URL.
        secure_scheme: Prefix every link value must start with.
        origin_pattern: File-name pattern whose first group is the card owner.
        identity_link_pattern: URL pattern whose first group is the linked username.
        max_lengths: Maximum character count per narrative field.
        max_list_items: Maximum item count per list field.
        required_item_fields: Sub-fields every item of an object-list field needs.
        dangerous_patterns: Ordered content-safety patterns; first match wins.
        excerpt_length: Characters of an offending string quoted in messages.
    """

    schema_version: str = "1"
    required_fields: tuple[str, ...] = ("name", "title", "bio")
    required_link: str = "github"
    secure_scheme: str = "https://"
    origin_pattern: re.Pattern[str] = re.compile(r"^@(.+)\.ya?ml$")
    identity_link_pattern: re.Pattern[str] = re.compile(
        r"^https?://github\.com/([A-Za-z0-9_-]+)/?$"
    )
    max_lengths: Mapping[str, int] = field(
        default_factory=lambda: dict(_DEFAULT_MAX_LENGTHS)
    )
    max_list_items: Mapping[str, int] = field(
        default_factory=lambda: dict(_DEFAULT_MAX_LIST_ITEMS)
    )
    required_item_fields: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(_DEFAULT_REQUIRED_ITEM_FIELDS)
    )
    dangerous_patterns: tuple[re.Pattern[str], ...] = _DEFAULT_DANGEROUS_PATTERNS
    excerpt_length: int = 80

    def __post_init__(self) -> None:
        """Freeze limit tables so shared schemas cannot be changed in place."""

        for name in ("max_lengths", "max_list_items", "required_item_fields"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def as_payload(self) -> dict[str, object]:
        """Return a JSON-serializable view of the schema."""

        return {
            "schema_version": self.schema_version,
            "required_fields": list(self.required_fields),
            "required_link": self.required_link,
            "secure_scheme": self.secure_scheme,
            "origin_pattern": self.origin_pattern.pattern,
            "identity_link_pattern": self.identity_link_pattern.pattern,
            "max_lengths": dict(self.max_lengths),
            "max_list_items": dict(self.max_list_items),
            "required_item_fields": {
                key: list(value) for key, value in self.required_item_fields.items()
            },
            "dangerous_patterns": [
                describe_pattern(pattern) for pattern in self.dangerous_patterns
            ],
            "excerpt_length": self.excerpt_length,
        }


DEFAULT_SCHEMA = CardSchema()


class ConfigLoader:
    """Factory methods for creating `CardSchema` values from external sources."""

    SCHEMA_CONFIG_ENV = "DEVCARD_SCHEMA_CONFIG"
    SCHEMA_VERSION_ENV = "DEVCARD_SCHEMA_VERSION"

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "schema_version",
            "required_fields",
            "required_link",
            "secure_scheme",
            "origin_pattern",
            "identity_link_pattern",
            "max_lengths",
            "max_list_items",
            "required_item_fields",
            "dangerous_patterns",
            "excerpt_length",
        }
    )

    @staticmethod
    def from_yaml(path: Path, base: CardSchema | None = None) -> CardSchema:
        """Create a schema from a YAML override file.

        Keys present in the file replace the matching `base` values, except
        `max_lengths`, `max_list_items`, and `required_item_fields`, which are
        merged over the base tables.
        """

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_schema_from_mapping(
            payload,
            source_label=f"YAML `{path}`",
            base=base if base is not None else DEFAULT_SCHEMA,
        )

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None, base: CardSchema | None = None
    ) -> CardSchema:
        """Create a schema from environment variables.

        `DEVCARD_SCHEMA_CONFIG` names an override file applied over `base`;
        `DEVCARD_SCHEMA_VERSION` then replaces the expected schema version.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env
        schema = base if base is not None else DEFAULT_SCHEMA

        config_path = ConfigLoader._optional_env_string(env_map, ConfigLoader.SCHEMA_CONFIG_ENV)
        if config_path is not None:
            schema = ConfigLoader.from_yaml(Path(config_path), base=schema)

        version = ConfigLoader._optional_env_string(env_map, ConfigLoader.SCHEMA_VERSION_ENV)
        if version is not None:
            schema = replace(schema, schema_version=version)
        return schema

    @staticmethod
    def resolve(
        schema_path: Path | None, env: Mapping[str, str] | None = None
    ) -> CardSchema:
        """Resolve the effective schema: explicit CLI file > environment > defaults."""

        if schema_path is not None:
            return ConfigLoader.from_yaml(schema_path)
        return ConfigLoader.from_env(env)

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_schema_from_mapping(
        payload: Mapping[str, Any], source_label: str, base: CardSchema
    ) -> CardSchema:
        """Build a schema by applying a normalized mapping payload over `base`."""

        ConfigLoader._validate_yaml_keys(payload, source_label)

        overrides: dict[str, Any] = {}
        for key in ("schema_version", "required_link", "secure_scheme"):
            value = ConfigLoader._optional_non_empty_string(payload, key, source_label)
            if value is not None:
                overrides[key] = value

        required_fields = ConfigLoader._optional_string_tuple(
            payload, "required_fields", source_label
        )
        if required_fields is not None:
            overrides["required_fields"] = required_fields

        for key in ("origin_pattern", "identity_link_pattern"):
            pattern = ConfigLoader._optional_pattern(payload, key, source_label)
            if pattern is not None:
                overrides[key] = pattern

        for key in ("max_lengths", "max_list_items"):
            limits = ConfigLoader._optional_positive_int_map(payload, key, source_label)
            if limits is not None:
                overrides[key] = {**getattr(base, key), **limits}

        item_fields = ConfigLoader._optional_item_fields(
            payload, "required_item_fields", source_label
        )
        if item_fields is not None:
            overrides["required_item_fields"] = {**base.required_item_fields, **item_fields}

        if "dangerous_patterns" in payload:
            raw_patterns = ConfigLoader._optional_string_tuple(
                payload, "dangerous_patterns", source_label
            )
            overrides["dangerous_patterns"] = tuple(
                ConfigLoader._compile_pattern(raw, "dangerous_patterns", source_label)
                for raw in raw_patterns or ()
            )

        if "excerpt_length" in payload:
            overrides["excerpt_length"] = ConfigLoader._positive_int(
                payload["excerpt_length"], "excerpt_length", source_label
            )

        return replace(base, **overrides)

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Reject keys the schema does not define."""

        unknown = sorted(
            str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS)
        )
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

    @staticmethod
    def _optional_non_empty_string(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> str | None:
        """Read an optional scalar field and normalize blank values to `None`."""

        if key not in payload:
            return None
        raw_value = payload[key]
        if isinstance(raw_value, (Mapping, list)):
            raise ValueError(f"{source_label} field `{key}` must be a scalar value.")
        return normalize_optional_string(raw_value)

    @staticmethod
    def _optional_string_tuple(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> tuple[str, ...] | None:
        """Read an optional list of non-blank strings."""

        if key not in payload:
            return None
        raw = payload[key]
        if not isinstance(raw, list):
            raise ValueError(f"{source_label} field `{key}` must be a list.")

        normalized: list[str] = []
        for item in raw:
            value = normalize_optional_string(item)
            if value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank item.")
            normalized.append(value)
        return tuple(normalized)

    @staticmethod
    def _optional_pattern(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> re.Pattern[str] | None:
        """Read and compile an optional regular-expression field."""

        raw = ConfigLoader._optional_non_empty_string(payload, key, source_label)
        if raw is None:
            return None
        pattern = ConfigLoader._compile_pattern(raw, key, source_label)
        if pattern.groups < 1:
            raise ValueError(
                f"{source_label} field `{key}` must capture the username in a group."
            )
        return pattern

    @staticmethod
    def _compile_pattern(raw: str, key: str, source_label: str) -> re.Pattern[str]:
        """Compile one configured pattern, mapping regex errors to `ValueError`."""

        try:
            return re.compile(raw)
        except re.error as exc:
            raise ValueError(
                f"{source_label} field `{key}` has invalid pattern `{raw}`: {exc}"
            ) from exc

    @staticmethod
    def _optional_positive_int_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, int] | None:
        """Read an optional mapping of field names to positive integers."""

        if key not in payload:
            return None
        raw = payload[key]
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, int] = {}
        for raw_key, raw_value in raw.items():
            field_name = normalize_optional_string(raw_key)
            if field_name is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            normalized[field_name] = ConfigLoader._positive_int(
                raw_value, f"{key}.{field_name}", source_label
            )
        return normalized

    @staticmethod
    def _optional_item_fields(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, tuple[str, ...]] | None:
        """Read an optional mapping of list fields to required sub-field names."""

        if key not in payload:
            return None
        raw = payload[key]
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, tuple[str, ...]] = {}
        for raw_key, raw_value in raw.items():
            field_name = normalize_optional_string(raw_key)
            if field_name is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            sub_fields = ConfigLoader._optional_string_tuple(
                {field_name: raw_value}, field_name, f"{source_label} `{key}`"
            )
            normalized[field_name] = sub_fields or ()
        return normalized

    @staticmethod
    def _positive_int(raw_value: object, key: str, source_label: str) -> int:
        """Validate a positive integer value."""

        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        if isinstance(raw_value, int):
            parsed = raw_value
        else:
            normalized = normalize_optional_string(raw_value)
            try:
                parsed = int(normalized or "")
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))


def describe_pattern(pattern: re.Pattern[str]) -> str:
    """Render a pattern with an inline case-insensitivity flag when set."""

    if pattern.flags & re.IGNORECASE and not pattern.pattern.startswith("(?i)"):
        return f"(?i){pattern.pattern}"
    return pattern.pattern
