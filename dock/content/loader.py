"""Document normalization and markdown file loading."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from ..models import Doc, DocType, ListEntity, ListItem
from .parser import extract_inline_tags, parse_front_matter, parse_tag_value, unique_tags
from .render import render_markdown_with_outline
from .rich_text import RichRenderer, render_rich_doc

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"
DEFAULT_LIST_TITLE = "Untitled List"

_FOLDER_TYPES = {
    "notes": DocType.NOTE,
    "journal": DocType.JOURNAL,
    "journals": DocType.JOURNAL,
    "brief": DocType.BRIEF,
    "briefs": DocType.BRIEF,
    "list": DocType.LIST,
    "lists": DocType.LIST,
}

_CHECKLIST_LINE = re.compile(r"^\s*[-*+]\s+\[[ xX]\]\s+")


def coerce_timestamp(value: Any) -> datetime | None:
    """Convert stored timestamp shapes to an aware datetime, or None.

    Accepts datetimes, dates, ISO-8601 strings and epoch milliseconds.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def infer_type_from_location(location: str | Path | None) -> DocType | None:
    """Infer a document type from the folder names in its path."""
    if not location:
        return None
    for part in Path(str(location)).parts[:-1]:
        doc_type = _FOLDER_TYPES.get(part.lower())
        if doc_type is not None:
            return doc_type
    return None


def classify_type(explicit: Any = None, location: str | Path | None = None) -> DocType:
    """Resolve a document type: explicit field first, then location, then note."""
    if isinstance(explicit, DocType):
        return explicit
    if isinstance(explicit, str):
        try:
            return DocType(explicit.strip().lower())
        except ValueError:
            pass
    return infer_type_from_location(location) or DocType.NOTE


def _as_tag_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return parse_tag_value(value)
    if isinstance(value, (list, tuple)):
        return [str(tag) for tag in value if tag]
    return []


def build_doc(
    raw: str,
    metadata: Mapping[str, Any] | None = None,
    *,
    rich_renderer: RichRenderer = render_rich_doc,
) -> Doc:
    """Normalize a raw body plus metadata into a ``Doc``.

    Front matter in ``raw`` is stripped and merged; explicit ``metadata``
    keys win over front matter keys. Tags are the explicit tags followed by
    inline ``#tags``, deduplicated case-insensitively.

    Rendering precedence: when ``content_json`` is present it is the source
    of truth for ``html`` (rendered by ``rich_renderer``) and the outline is
    empty; otherwise ``content`` is rendered as markdown.

    Recognized metadata keys: path, title, tags, type, location, created_at,
    updated_at, content_json, is_draft, id, source, meta.
    """
    metadata = dict(metadata or {})
    parsed = parse_front_matter(raw or "")
    front = parsed.data
    content = parsed.content

    title = str(metadata.get("title") or front.get("title") or DEFAULT_TITLE).strip() or DEFAULT_TITLE
    doc_type = classify_type(
        metadata.get("type") or front.get("type"),
        metadata.get("location") or metadata.get("path"),
    )

    explicit_tags = _as_tag_list(metadata.get("tags")) + _as_tag_list(front.get("tags"))
    tags = unique_tags(explicit_tags + extract_inline_tags(content))

    content_json = metadata.get("content_json")
    if content_json:
        html = rich_renderer(content_json)
        outline = []
    else:
        content_json = None
        rendered = render_markdown_with_outline(content)
        html, outline = rendered.html, rendered.outline

    meta = dict(metadata.get("meta") or {})
    for key, value in front.items():
        if key not in ("title", "tags", "type"):
            meta.setdefault(key, value)

    path = metadata.get("path") or f"{doc_type.value}/{title}"

    return Doc(
        path=str(path),
        title=title,
        content=content,
        content_json=content_json,
        html=html,
        outline=outline,
        tags=tags,
        raw_tags=unique_tags(explicit_tags),
        type=doc_type,
        created_at=coerce_timestamp(metadata.get("created_at") or front.get("created")),
        updated_at=coerce_timestamp(metadata.get("updated_at") or front.get("updated")),
        is_draft=bool(metadata.get("is_draft", False)),
        id=metadata.get("id"),
        source=str(metadata.get("source") or "file"),
        meta=meta,
    )


def record_path(record_type: str, record_id: str) -> str:
    """Stable doc path for a store record."""
    return f"dock:{record_type}/{record_id}"


def doc_from_record(record: Any, *, rich_renderer: RichRenderer = render_rich_doc) -> Doc:
    """Normalize a store ``Record`` into a ``Doc``."""
    doc_type = classify_type(record.type)
    return build_doc(
        record.body or "",
        {
            "path": record_path(doc_type.value, record.id),
            "id": record.id,
            "title": record.title,
            "type": doc_type,
            "tags": list(record.tags or []),
            "content_json": record.content_json,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
            "is_draft": record.is_draft,
            "source": "store",
            "meta": dict(record.meta or {}),
        },
        rich_renderer=rich_renderer,
    )


def list_from_record(record: Any) -> ListEntity:
    """Normalize a store ``Record`` of type list into a ``ListEntity``."""
    items = [ListItem.from_dict(item) for item in record.items or [] if isinstance(item, Mapping)]
    return ListEntity(
        id=record.id,
        title=record.title or DEFAULT_LIST_TITLE,
        items=items,
        created_at=coerce_timestamp(record.created_at),
        updated_at=coerce_timestamp(record.updated_at),
    )


def is_checklist(content: str) -> bool:
    """True when every non-blank body line is a ``- [ ]`` checklist entry."""
    lines = [line for line in content.splitlines() if line.strip()]
    return bool(lines) and all(_CHECKLIST_LINE.match(line) for line in lines)


def load_markdown_file(path: Path, root: Path | None = None) -> Doc:
    """Load a single markdown file as a ``Doc``.

    The title falls back to the first ``# `` heading, then the file stem.
    Timestamps fall back to the file modification time.
    """
    raw = path.read_text(encoding="utf-8")
    parsed = parse_front_matter(raw)

    try:
        rel = path.relative_to(root) if root else Path(path.name)
    except ValueError:
        rel = Path(path.name)

    title = parsed.data.get("title")
    if not title:
        for line in parsed.content.split("\n"):
            if line.startswith("# "):
                title = line[2:].strip()
                break
    mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    return build_doc(
        raw,
        {
            "path": rel.as_posix(),
            "title": title or path.stem,
            "location": rel.as_posix(),
            "created_at": parsed.data.get("created") or mtime,
            "updated_at": parsed.data.get("updated") or mtime,
            "source": "file",
        },
    )


def load_docs(root: Path) -> list[Doc]:
    """Load every markdown file under ``root``, skipping hidden paths.

    Files that cannot be read are logged and skipped.
    """
    docs = []
    for md_file in sorted(root.rglob("*.md")):
        if any(part.startswith(".") for part in md_file.relative_to(root).parts):
            continue
        try:
            docs.append(load_markdown_file(md_file, root))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to load %s: %s", md_file, e)
    return docs
