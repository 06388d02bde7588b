"""Import and export commands - move records between the store and markdown files."""

from __future__ import annotations

from pathlib import Path

import frontmatter
from rich.console import Console
from rich.markup import escape

from ..content.loader import is_checklist, list_from_record, load_docs, load_markdown_file
from ..content.parser import slugify
from ..models import Doc, DocType, ListEntity
from ..service import DockSession
from ..store.records import Record
from ..views.lists import seed_items_from_checklist

EXPORT_FOLDERS = {
    DocType.NOTE.value: "notes",
    DocType.JOURNAL.value: "journal",
    DocType.BRIEF.value: "briefs",
    DocType.LIST.value: "lists",
}

# Front matter keys that describe the file rather than the record
_FILE_KEYS = ("created", "updated", "id")


def _collect(paths: list[Path]) -> list[Doc]:
    docs: list[Doc] = []
    for path in paths:
        if path.is_dir():
            docs.extend(load_docs(path))
        else:
            docs.append(load_markdown_file(path, path.parent))
    return docs


def import_doc(session: DockSession, doc: Doc) -> str:
    """Store one loaded markdown document; checklist files become lists."""
    if doc.type == DocType.LIST or is_checklist(doc.content):
        return session.create_list_from_items(doc.title, seed_items_from_checklist(doc.content))
    meta = {key: value for key, value in doc.meta.items() if key not in _FILE_KEYS}
    return session.create_document(doc.type, title=doc.title, content=doc.content, tags=doc.raw_tags, meta=meta)


def run_import(session: DockSession, paths: list[Path]) -> list[str]:
    """Import markdown files and folders.

    Type comes from ``type:`` front matter or the containing folder name.
    """
    console = Console()
    created = []
    for doc in _collect(paths):
        record_id = import_doc(session, doc)
        created.append(record_id)
        console.print(f"  [green]+[/green] {escape(doc.path)} -> {record_id}", highlight=False)
    console.print(f"[bold]Imported {len(created)} records[/bold]")
    return created


def _checklist_body(entity: ListEntity) -> str:
    lines = [f"- [{'x' if item.completed else ' '}] {item.text}" for item in entity.items]
    return "\n".join(lines) + "\n" if lines else ""


def record_to_markdown(record: Record) -> str:
    """Serialize a record as markdown with YAML front matter."""
    metadata = {"title": record.title, "type": record.type}
    if record.type == DocType.LIST.value:
        body = _checklist_body(list_from_record(record))
    else:
        body = record.body or ""
        metadata["tags"] = list(record.tags)
        for key, value in (record.meta or {}).items():
            if isinstance(value, (str, int, float, bool)) and key not in metadata:
                metadata[key] = value
    metadata["id"] = record.id
    if record.created_at:
        metadata["created"] = record.created_at.isoformat()
    if record.updated_at:
        metadata["updated"] = record.updated_at.isoformat()

    post = frontmatter.Post(body, **metadata)
    # One line per key: flow-style tags, no folding of long titles
    return frontmatter.dumps(post, default_flow_style=None, width=float("inf")) + "\n"


def export_path(out_dir: Path, record: Record) -> Path:
    name = slugify(record.title).lower() or record.type
    return out_dir / EXPORT_FOLDERS[record.type] / f"{name}-{record.id[:8]}.md"


def run_export(session: DockSession, out_dir: Path) -> list[Path]:
    """Write every active record to ``out_dir/<type folder>/<slug>-<id>.md``."""
    console = Console()
    written = []
    for record in session.snapshot():
        path = export_path(out_dir, record)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(record_to_markdown(record), encoding="utf-8")
        written.append(path)
    console.print(f"[bold]Exported {len(written)} records[/bold] to {escape(str(out_dir))}", highlight=False)
    return written
