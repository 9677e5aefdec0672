"""Shared scalar helpers for markup parsing and config value normalization."""

from __future__ import annotations


_DOUBLE_QUOTED_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def indentation_of(line: str) -> int:
    """Return the leading whitespace width of a line, or `-1` for blank lines."""

    content = line.lstrip()
    if not content:
        return -1
    return len(line) - len(content)


def is_blank_or_comment(line: str) -> bool:
    """Return whether a line is blank or a full-line `#` comment."""

    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def unquote_scalar(text: str) -> str:
    """Strip one pair of matching quotes from a scalar and decode its escapes.

    Double-quoted text decodes `\\\\`, `\\"`, `\\n`, `\\t` and `\\r`; unknown
    escape sequences are kept verbatim. Single-quoted text decodes the doubled
    quote (`''`) to one quote. Unquoted text is returned unchanged.

    Args:
        text: Raw scalar text with surrounding whitespace already removed.

    Returns:
        Scalar value without its quoting.
    """

    if len(text) < 2 or text[0] != text[-1] or text[0] not in {'"', "'"}:
        return text

    inner = text[1:-1]
    if text[0] == "'":
        return inner.replace("''", "'")
    return _decode_double_quoted(inner)


def split_inline_list(text: str) -> list[str]:
    """Split an inline `[a, b, c]` list into unquoted, non-empty scalar items."""

    inner = text[1:-1]
    items = [unquote_scalar(part.strip()) for part in inner.split(",")]
    return [item for item in items if item]


def _decode_double_quoted(inner: str) -> str:
    """Decode the supported backslash escapes of a double-quoted scalar body."""

    if "\\" not in inner:
        return inner

    decoded: list[str] = []
    index = 0
    while index < len(inner):
        character = inner[index]
        if character == "\\" and index + 1 < len(inner):
            replacement = _DOUBLE_QUOTED_ESCAPES.get(inner[index + 1])
            if replacement is not None:
                decoded.append(replacement)
                index += 2
                continue
        decoded.append(character)
        index += 1
    return "".join(decoded)
