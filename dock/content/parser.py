"""Text parsing utilities for front matter, slugs, inline tags and snippets.

All functions here are total: malformed input degrades to a sensible
default instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

FRONT_MATTER_DELIMITER = "---"

# #tag preceded by start-of-string or whitespace; mid-word hashes are ignored
INLINE_TAG_PATTERN = re.compile(r"(?<!\S)#([A-Za-z0-9_-]+)")

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_DQ_ESCAPE = re.compile(r'\\(["\\])')

SNIPPET_BEFORE = 40
SNIPPET_AFTER = 60
ELLIPSIS = "…"


@dataclass
class FrontMatter:
    """Result of splitting a document into its header block and body."""

    data: dict[str, str | list[str]] = field(default_factory=dict)
    content: str = ""


def _strip_quotes(value: str) -> str:
    """Strip surrounding quotes, undoing YAML's ``''`` and ``\\"`` escapes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        inner = value[1:-1]
        if value[0] == "'":
            return inner.replace("''", "'")
        return _DQ_ESCAPE.sub(r"\1", inner)
    return value


def parse_tag_value(value: str) -> list[str]:
    """Parse ``[a, b]`` or ``a, b`` into a list of tag strings."""
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    tags = []
    for part in value.split(","):
        tag = _strip_quotes(part.strip()).strip()
        if tag:
            tags.append(tag)
    return tags


def parse_front_matter(raw: str) -> FrontMatter:
    """Split a ``---`` delimited key/value header from the markdown body.

    Input without a leading delimiter, or with an unterminated header, is
    returned untouched as content with empty data.
    """
    lines = raw.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return FrontMatter(data={}, content=raw)

    closing = None
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DELIMITER:
            closing = index
            break
    if closing is None:
        return FrontMatter(data={}, content=raw)

    data: dict[str, str | list[str]] = {}
    for line in lines[1:closing]:
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not key:
            continue
        if key == "tags":
            data[key] = parse_tag_value(value)
        else:
            data[key] = _strip_quotes(value.strip())

    content = "".join(lines[closing + 1 :]).lstrip()
    return FrontMatter(data=data, content=content)


def slugify(text: str) -> str:
    """Lowercase, drop punctuation, and hyphenate whitespace runs."""
    slug = _SLUG_STRIP.sub("", text.lower()).strip()
    return _WHITESPACE.sub("-", slug)


def extract_inline_tags(content: str) -> list[str]:
    """Return ``#tag`` tokens from free text without the leading hash."""
    return INLINE_TAG_PATTERN.findall(content or "")


def unique_tags(tags: list[str]) -> list[str]:
    """Deduplicate case-insensitively, keeping first-seen casing and order."""
    seen = set()
    result = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        key = tag.lower()
        if not tag or key in seen:
            continue
        seen.add(key)
        result.append(tag)
    return result


def build_snippet(content: str, needle: str, max_len: int = 120) -> str:
    """Return a short excerpt of ``content`` around the first ``needle`` hit.

    Without a hit, the first ``max_len`` characters are returned. With a hit,
    the window spans 40 characters before to 60 after the match and is
    marked with an ellipsis on each side that was cut.
    """
    content = content or ""
    index = content.lower().find(needle.lower()) if needle else -1
    if index == -1:
        return content[:max_len].strip()

    start = max(0, index - SNIPPET_BEFORE)
    end = min(len(content), index + len(needle) + SNIPPET_AFTER)
    snippet = content[start:end].strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS
    return snippet
