"""Indentation-driven parser for the devcard block-markup subset.

Responsibilities:
- Turn profile text into a read-only `Document` of scalars, lists, and maps.
- Skip unparseable lines instead of failing, recording one `ParseWarning` each.
- Keep prototype-polluting keys out of every map at every depth.

Supported subset:
- `key: value` pairs with plain, single-quoted, or double-quoted scalars.
- Nested maps and lists introduced by a key with an empty value.
- Literal (`|`) and folded (`>`) block scalars.
- Inline lists (`[a, b, c]`) and list items that are scalars or maps.

Anchors, tags, flow maps, multi-document streams, and lists of lists are not
supported.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from ..models.datatypes import Document, Node, ParseResult, ParseWarning
from ..parsing import indentation_of, is_blank_or_comment, split_inline_list, unquote_scalar

DANGEROUS_KEYS = frozenset({"__proto__", "constructor", "prototype"})

_KEY_VALUE_RE = re.compile(r"^(?P<key>[A-Za-z0-9_.\-]+)\s*:(?:\s+(?P<value>.*))?$")
_BLOCK_SCALAR_RE = re.compile(r"^(?P<style>[|>])[-+]?$")


@dataclass(frozen=True, slots=True)
class _Line:
    """One source line with precomputed indentation."""

    number: int
    indent: int
    content: str
    raw: str
    skippable: bool

    @classmethod
    def from_raw(cls, number: int, raw: str) -> _Line:
        """Build a line record from raw text, trimming trailing whitespace."""

        trimmed = raw.rstrip()
        return cls(
            number=number,
            indent=indentation_of(trimmed),
            content=trimmed.strip(),
            raw=trimmed,
            skippable=is_blank_or_comment(trimmed),
        )

    @property
    def blank(self) -> bool:
        """Return whether the line has no content at all."""

        return self.indent < 0

    @property
    def list_item(self) -> bool:
        """Return whether the line starts with a `- ` list-item marker."""

        return self.content == "-" or self.content.startswith("- ")


def parse(text: str) -> Document:
    """Parse profile text into a `Document`, discarding parse warnings."""

    return parse_document(text).document


def parse_document(text: str) -> ParseResult:
    """Parse profile text into a `Document` plus the lines it had to skip.

    Args:
        text: Full document text. `\\r\\n` and `\\r` line endings are accepted.

    Returns:
        Parse result with the document tree and ordered warnings.

    Raises:
        TypeError: If `text` is not a string.
    """

    if not isinstance(text, str):
        raise TypeError(f"Profile text must be a string, got {type(text).__name__}.")
    return _BlockParser(text).run()


class _BlockParser:
    """Recursive-descent parser over one document's lines; single use."""

    def __init__(self, text: str) -> None:
        """Split text into line records."""

        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        self._lines = [
            _Line.from_raw(number, raw)
            for number, raw in enumerate(normalized.split("\n"), start=1)
        ]
        self._warnings: list[ParseWarning] = []

    def run(self) -> ParseResult:
        """Parse the root mapping, recovering from stray root-level content."""

        root: dict[str, Node] = {}
        index = self._next_content_index(0)
        while index < len(self._lines):
            line = self._lines[index]
            if line.list_item:
                self._warn(line, "list item outside of a list")
                index = self._skip_block(index + 1, line.indent)
            else:
                index = self._parse_map(root, index, line.indent)
            index = self._next_content_index(index)
        return ParseResult(document=Document(root), warnings=tuple(self._warnings))

    def _parse_map(
        self,
        target: dict[str, Node],
        start: int,
        base_indent: int,
        head: _Line | None = None,
    ) -> int:
        """Parse `key: value` entries at `base_indent` into `target`.

        Stops at the first content line indented less than `base_indent` or at
        a list-item marker on the base level, and returns that line's index.
        `head` replaces the line at `start`; list items use it to present the
        text after the dash as the first entry of the item map.
        """

        index = start
        while index < len(self._lines):
            line = head if head is not None and index == start else self._lines[index]
            if line.skippable:
                index += 1
                continue
            if line.indent < base_indent:
                break
            if line.indent > base_indent:
                self._warn(line, "unexpected indentation")
                index += 1
                continue
            if line.list_item:
                break
            index = self._parse_entry(target, line, index)
        return index

    def _parse_entry(self, target: dict[str, Node], line: _Line, index: int) -> int:
        """Parse one map entry starting at `index` and return the next index."""

        match = _KEY_VALUE_RE.match(line.content)
        if match is None:
            self._warn(line, "expected `key: value`")
            return index + 1

        key = match.group("key")
        if key in DANGEROUS_KEYS:
            self._warn(line, f"rejected key `{key}`")
            return self._skip_block(index + 1, line.indent)

        node, next_index = self._parse_value(line, match.group("value") or "", index)
        if key in target:
            self._warn(line, f"duplicate key `{key}` overwrites earlier value")
        target[key] = node
        return next_index

    def _parse_value(self, line: _Line, value: str, index: int) -> tuple[Node, int]:
        """Classify an entry value and parse any block it introduces."""

        block_match = _BLOCK_SCALAR_RE.match(value)
        if block_match is not None:
            folded = block_match.group("style") == ">"
            return self._parse_block_scalar(index + 1, line.indent, folded)
        if not value:
            return self._parse_nested(index + 1, line.indent)
        if value.startswith("[") and value.endswith("]"):
            return split_inline_list(value), index + 1
        return unquote_scalar(value), index + 1

    def _parse_nested(self, start: int, parent_indent: int) -> tuple[Node, int]:
        """Parse the nested map or list under an empty-valued key."""

        index = self._next_content_index(start)
        if index >= len(self._lines) or self._lines[index].indent <= parent_indent:
            return "", index

        first = self._lines[index]
        if first.list_item:
            items: list[Node] = []
            return items, self._parse_list(items, index, first.indent)

        mapping: dict[str, Node] = {}
        return mapping, self._parse_map(mapping, index, first.indent)

    def _parse_list(self, items: list[Node], start: int, item_indent: int) -> int:
        """Parse `- ` items aligned at `item_indent` into `items`."""

        index = start
        while index < len(self._lines):
            line = self._lines[index]
            if line.skippable:
                index += 1
                continue
            if line.indent < item_indent:
                break
            if not line.list_item:
                if line.indent == item_indent:
                    break
                self._warn(line, "unexpected indentation")
                index += 1
                continue
            if line.indent > item_indent:
                self._warn(line, "nested list items are not supported")
                index = self._skip_block(index + 1, line.indent)
                continue
            index = self._parse_item(items, line, index)
        return index

    def _parse_item(self, items: list[Node], line: _Line, index: int) -> int:
        """Parse one list item as a scalar or as a map seeded from the dash line."""

        remainder = line.content[1:]
        item_text = remainder.strip()
        if _KEY_VALUE_RE.match(item_text) is None:
            items.append(unquote_scalar(item_text))
            return index + 1

        field_indent = line.indent + 1 + (len(remainder) - len(remainder.lstrip()))
        head = _Line(
            number=line.number,
            indent=field_indent,
            content=item_text,
            raw=line.raw,
            skippable=False,
        )
        mapping: dict[str, Node] = {}
        next_index = self._parse_map(mapping, index, field_indent, head=head)
        items.append(mapping)
        return next_index

    def _parse_block_scalar(self, start: int, key_indent: int, folded: bool) -> tuple[str, int]:
        """Collect a literal or folded block scalar below a key.

        The block indentation is set by its first non-blank line and must be
        deeper than the key; every following line at or beyond it contributes
        its text minus that prefix. Blank lines inside the block are kept.
        """

        index = start
        while index < len(self._lines) and self._lines[index].blank:
            index += 1
        if index >= len(self._lines) or self._lines[index].indent <= key_indent:
            return "", index

        block_indent = self._lines[index].indent
        segments: list[str] = []
        while index < len(self._lines):
            line = self._lines[index]
            if line.blank:
                segments.append("")
            elif line.indent < block_indent:
                break
            else:
                segments.append(line.raw[block_indent:])
            index += 1

        text = _fold_segments(segments) if folded else "\n".join(segments)
        return text.rstrip(), index

    def _skip_block(self, start: int, indent: int) -> int:
        """Skip blank lines and every line indented deeper than `indent`."""

        index = start
        while index < len(self._lines):
            line = self._lines[index]
            if not line.skippable and line.indent <= indent:
                break
            index += 1
        return index

    def _next_content_index(self, start: int) -> int:
        """Return the index of the next non-blank, non-comment line."""

        index = start
        while index < len(self._lines) and self._lines[index].skippable:
            index += 1
        return index

    def _warn(self, line: _Line, reason: str) -> None:
        """Record one skipped or reinterpreted line."""

        self._warnings.append(
            ParseWarning(line_number=line.number, reason=reason, text=line.content)
        )


def _fold_segments(segments: list[str]) -> str:
    """Join block lines with spaces; blank lines become paragraph newlines."""

    folded = ""
    pending_breaks = 0
    for segment in segments:
        if not segment:
            pending_breaks += 1
            continue
        if folded:
            folded += "\n" * pending_breaks if pending_breaks else " "
        folded += segment
        pending_breaks = 0
    return folded
