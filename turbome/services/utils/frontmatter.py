"""
Flat frontmatter codec for markdown files.

Only the subset the editor writes is understood: a leading ``---`` line, one
``key: value`` pair per line, and a closing ``---`` line. Nested mappings,
lists and multi-line scalars are not supported; lines that do not look like
``key: value`` are dropped when parsing.
"""

import re
from typing import Any

FRONTMATTER_DELIMITER = "---"

# Opening delimiter, zero or more lines, closing delimiter on its own line.
_FRONTMATTER_RE = re.compile(r"\A---\n((?:[^\n]*\n)*?)---\n(.*)\Z", re.DOTALL)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_QUOTE_CHARS = "\"'`"

Scalar = str | int | float | bool


def strip_quotes(value: str) -> str:
    """Remove one leading and one trailing quote character, each if present."""
    if value[:1] and value[0] in _QUOTE_CHARS:
        value = value[1:]
    if value[-1:] and value[-1] in _QUOTE_CHARS:
        value = value[:-1]
    return value


def coerce_value(raw: str) -> Scalar:
    """
    Interpret a raw frontmatter value.

    Quotes are stripped first, so a quoted ``"true"`` or ``"42"`` still
    becomes a boolean or a number.
    """
    value = strip_quotes(raw.strip())
    if value == "true":
        return True
    if value == "false":
        return False
    if _NUMBER_RE.fullmatch(value):
        if any(c in value for c in ".eE"):
            return float(value)
        return int(value)
    return value


def parse(content: str) -> tuple[dict[str, Scalar] | None, str]:
    """
    Split markdown text into its frontmatter map and body.

    Args:
        content: Full file content.

    Returns:
        ``(frontmatter, body)``. ``frontmatter`` is None when the content does
        not start with a frontmatter block, in which case ``body`` is the
        original content.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content

    block, body = match.group(1), match.group(2)
    frontmatter: dict[str, Scalar] = {}
    for line in block.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, raw_value = trimmed.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        frontmatter[key] = coerce_value(raw_value)

    return frontmatter, body


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        value = ",".join(str(item) for item in value)
    elif value is None:
        value = "null"
    return f'"{value}"'


def serialize(frontmatter: dict[str, Any] | None, body: str) -> str:
    """
    Prepend a frontmatter block to a markdown body.

    Strings are written double-quoted, booleans and numbers bare. Anything
    else is stringified and quoted. An empty or missing map leaves the body
    untouched.
    """
    if not frontmatter:
        return body

    lines = [FRONTMATTER_DELIMITER]
    for key, value in frontmatter.items():
        lines.append(f"{key}: {_format_value(value)}")
    lines.append(FRONTMATTER_DELIMITER)
    return "\n".join(lines) + "\n" + body
