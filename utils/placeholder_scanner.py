"""
Locate placeholders in merged paragraph text.

Two delimiter styles exist and are kept apart on purpose:
``${key}`` for Word templates (key matched exactly) and ``{{ key }}`` for
HTML templates (key trimmed). Table repeat markers are always
``${table:name}``.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from core.constants import (
    DOLLAR_PLACEHOLDER_PATTERN,
    MUSTACHE_PLACEHOLDER_PATTERN,
    TABLE_MARKER_PATTERN,
)


class PlaceholderSyntax(Enum):
    DOLLAR = "dollar"
    MUSTACHE = "mustache"


@dataclass(frozen=True)
class Placeholder:
    key: str
    start: int
    end: int
    raw: str


@dataclass(frozen=True)
class TableMarker:
    name: str
    start: int
    end: int
    raw: str


def _pattern_for(syntax: PlaceholderSyntax):
    if syntax is PlaceholderSyntax.MUSTACHE:
        return MUSTACHE_PLACEHOLDER_PATTERN
    return DOLLAR_PLACEHOLDER_PATTERN


def token_for(key: str, syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR) -> str:
    """Literal placeholder text for ``key``, e.g. ``${name}`` or ``{{name}}``."""
    if syntax is PlaceholderSyntax.MUSTACHE:
        return "{{" + key + "}}"
    return "${" + key + "}"


def scan(text: str, syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR) -> List[Placeholder]:
    """Return every placeholder in ``text`` in document order."""
    if not text:
        return []

    found = []
    for match in _pattern_for(syntax).finditer(text):
        key = match.group(1)
        if syntax is PlaceholderSyntax.MUSTACHE:
            key = key.strip()
        found.append(Placeholder(key=key, start=match.start(), end=match.end(), raw=match.group(0)))
    return found


def first_image_placeholder(
    text: str,
    keys: Iterable[str],
    syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR,
) -> Optional[Placeholder]:
    """First placeholder, by position, whose key is one of ``keys``."""
    wanted = set(keys)
    if not wanted:
        return None
    for placeholder in scan(text, syntax):
        if placeholder.key in wanted:
            return placeholder
    return None


def find_table_marker(text: str) -> Optional[TableMarker]:
    if not text:
        return None
    match = TABLE_MARKER_PATTERN.search(text)
    if match is None:
        return None
    return TableMarker(name=match.group(1), start=match.start(), end=match.end(), raw=match.group(0))


def strip_table_markers(text: str) -> str:
    """Remove every ``${table:name}`` marker, keeping the surrounding text."""
    if not text:
        return text
    return TABLE_MARKER_PATTERN.sub("", text)
