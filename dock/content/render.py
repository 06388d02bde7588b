"""Markdown rendering with heading outline extraction.

Headings of level 2 and 3 get a slug id and an outline entry; all other
headings pass through untouched.

Dependencies:
    - markdown-it-py >= 3.0.0
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..models import OutlineEntry
from .parser import parse_front_matter, slugify

OUTLINE_LEVELS = (2, 3)
FALLBACK_SLUG = "section"


def create_markdown() -> MarkdownIt:
    """CommonMark renderer with GFM tables and strikethrough."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


_md = create_markdown()


@dataclass
class RenderResult:
    html: str = ""
    outline: list[OutlineEntry] = field(default_factory=list)


def _inline_text(token: Token | None) -> str:
    """Plain text of an inline token, without markup."""
    if token is None:
        return ""
    if not token.children:
        return token.content.strip()
    parts = []
    for child in token.children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return "".join(parts).strip()


class SlugRegistry:
    """Hands out unique heading ids within one render pass."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._used: set[str] = set()

    def claim(self, text: str) -> str:
        base = slugify(text) or FALLBACK_SLUG
        count = self._counts.get(base, 0) + 1
        candidate = base if count == 1 else f"{base}-{count}"
        # A literal heading like "Setup 2" may already own "setup-2"
        while candidate in self._used:
            count += 1
            candidate = f"{base}-{count}"
        self._counts[base] = count
        self._used.add(candidate)
        return candidate


def render_markdown_with_outline(content: str) -> RenderResult:
    """Render markdown to HTML and collect the level 2/3 heading outline.

    Any leading front matter block is removed before rendering. The result
    depends only on ``content``, so repeated calls produce identical output.

    Args:
        content: Markdown source

    Returns:
        RenderResult with ``html`` and ``outline`` in document order
    """
    cleaned = parse_front_matter(content or "").content
    env: dict = {}
    tokens = _md.parse(cleaned, env)

    outline: list[OutlineEntry] = []
    slugs = SlugRegistry()
    for index, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        level = int(token.tag[1:])
        if level not in OUTLINE_LEVELS:
            continue
        inline = tokens[index + 1] if index + 1 < len(tokens) else None
        text = _inline_text(inline)
        heading_id = slugs.claim(text)
        token.attrSet("id", heading_id)
        outline.append(OutlineEntry(level=level, text=text, id=heading_id))

    html = _md.renderer.render(tokens, _md.options, env)
    return RenderResult(html=html, outline=outline)
