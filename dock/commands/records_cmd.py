"""Record commands: create, update, delete, get and list."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..errors import ValidationError
from ..models import DocType
from ..service import DockSession
from ..views.lists import build_items, parse_item_texts


def parse_tags(value: str | None) -> list[str]:
    """Split ``"a, b"`` into tags, dropping blanks."""
    return [tag.strip() for tag in (value or "").split(",") if tag.strip()]


def read_content(content: str | None, file: Path | None) -> str | None:
    """``--file`` wins over ``--content``; None when neither is given."""
    if file is not None:
        return file.read_text(encoding="utf-8")
    return content


def _check_type(session: DockSession, record_id: str, record_type: str) -> None:
    record = session.get_record(record_id)
    if record.type != record_type:
        raise ValidationError(f"{record_id} is a {record.type}, not a {record_type}")


def run_create(
    session: DockSession,
    record_type: str,
    *,
    title: str | None = None,
    content: str | None = None,
    file: Path | None = None,
    tags: str | None = None,
    items: str | None = None,
    draft: bool = False,
) -> str:
    """Create a record and report its id."""
    console = Console()
    if record_type == DocType.LIST.value:
        record_id = session.create_list(title or "", parse_item_texts(items))
    else:
        record_id = session.create_document(
            record_type,
            title=title or "",
            content=read_content(content, file) or "",
            tags=parse_tags(tags),
            is_draft=draft,
        )
    console.print(f"Created {record_type} {record_id}", highlight=False)
    return record_id


def run_update(
    session: DockSession,
    record_type: str,
    record_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    file: Path | None = None,
    tags: str | None = None,
    items: str | None = None,
    status: str | None = None,
) -> None:
    """Merge the given fields into an existing record."""
    console = Console()
    _check_type(session, record_id, record_type)

    updates: dict = {}
    if title is not None:
        updates["title"] = title
    if status is not None:
        updates["status"] = status
    if record_type == DocType.LIST.value:
        if items is not None:
            updates["items"] = [item.to_dict() for item in build_items(parse_item_texts(items))]
    else:
        body = read_content(content, file)
        if body is not None:
            updates["body"] = body
        if tags is not None:
            updates["tags"] = parse_tags(tags)

    session.update_record(record_id, updates)
    console.print(f"Updated {record_type} {record_id}", highlight=False)


def run_delete(session: DockSession, record_type: str, record_id: str, *, hard: bool = False) -> None:
    console = Console()
    _check_type(session, record_id, record_type)
    session.delete_record(record_id, hard=hard)
    console.print(f"Deleted {record_type} {record_id}", highlight=False)


def run_get(session: DockSession, record_type: str, record_id: str) -> dict:
    """Print one record as JSON."""
    _check_type(session, record_id, record_type)
    data = session.get_record(record_id).to_dict()
    print(json.dumps(data, indent=2, default=str))
    return data


def run_list(session: DockSession, record_type: str, *, limit: int = 50, status: str | None = "active") -> list[dict]:
    """Print records of one type, newest first, as JSON."""
    records = session.list_records(type=record_type, status=status, limit=limit)
    items = [record.to_dict() for record in records]
    print(json.dumps({"items": items}, indent=2, default=str))
    return items
