"""HTML rendering for the editor's structured rich-text documents.

Documents are ProseMirror-style JSON trees::

    {"type": "doc", "content": [{"type": "paragraph", "content": [...]}]}

Unknown node types render their children so content is never dropped.
"""

from __future__ import annotations

from html import escape
from typing import Any, Callable

RichRenderer = Callable[[Any], str]

EMPTY_RICH_DOC = {"type": "doc", "content": [{"type": "paragraph"}]}

_BLOCK_TAGS = {
    "paragraph": "p",
    "blockquote": "blockquote",
    "bulletList": "ul",
    "orderedList": "ol",
    "listItem": "li",
    "taskList": 'ul data-type="taskList"',
}

_MARK_TAGS = {
    "bold": "strong",
    "strong": "strong",
    "italic": "em",
    "em": "em",
    "strike": "s",
    "code": "code",
    "underline": "u",
}


def _render_text(node: dict) -> str:
    html = escape(str(node.get("text", "")), quote=False)
    for mark in node.get("marks") or []:
        if not isinstance(mark, dict):
            continue
        kind = mark.get("type")
        if kind == "link":
            href = escape(str((mark.get("attrs") or {}).get("href", "")), quote=True)
            html = f'<a href="{href}">{html}</a>'
        elif kind in _MARK_TAGS:
            tag = _MARK_TAGS[kind]
            html = f"<{tag}>{html}</{tag}>"
    return html


def _render_children(node: dict) -> str:
    children = node.get("content") or []
    if not isinstance(children, list):
        return ""
    return "".join(_render_node(child) for child in children)


def _render_node(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    kind = node.get("type")
    attrs = node.get("attrs") or {}

    if kind == "text":
        return _render_text(node)
    if kind == "hardBreak":
        return "<br>"
    if kind == "horizontalRule":
        return "<hr>"
    if kind == "heading":
        try:
            level = min(max(int(attrs.get("level", 1)), 1), 6)
        except (TypeError, ValueError):
            level = 1
        return f"<h{level}>{_render_children(node)}</h{level}>"
    if kind == "codeBlock":
        code = "".join(str(child.get("text", "")) for child in node.get("content") or [] if isinstance(child, dict))
        return f"<pre><code>{escape(code, quote=False)}</code></pre>"
    if kind == "taskItem":
        checked = " checked" if attrs.get("checked") else ""
        return f'<li data-type="taskItem"><input type="checkbox" disabled{checked}> {_render_children(node)}</li>'
    if kind in _BLOCK_TAGS:
        open_tag = _BLOCK_TAGS[kind]
        close_tag = open_tag.split(" ", 1)[0]
        return f"<{open_tag}>{_render_children(node)}</{close_tag}>"
    return _render_children(node)


def render_rich_doc(document: Any) -> str:
    """Render a rich-text JSON document to HTML. Never raises."""
    return _render_node(document)
