"""Watch and history commands - follow store changes live, or review the audit log."""

from __future__ import annotations

import json
import threading
from datetime import datetime

from rich.console import Console
from rich.markup import escape

from ..audit_log import AuditLog, format_audit_entry
from ..models import Doc, ListEntity
from ..service import DockSession


def run_watch(session: DockSession, *, lists: bool = False, stop: threading.Event | None = None) -> int:
    """
    Print a summary line for every new snapshot until interrupted.

    The first snapshot is printed immediately. Returns the number of
    snapshots seen.
    """
    console = Console(stderr=True)
    stop = stop or threading.Event()
    seen = 0

    def on_docs(docs: list[Doc]) -> None:
        nonlocal seen
        seen += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        newest = docs[0].title if docs else "-"
        console.print(f"[dim]{timestamp}[/dim] {len(docs)} docs, latest: {escape(newest)}", highlight=False)

    def on_lists(entities: list[ListEntity]) -> None:
        nonlocal seen
        seen += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        open_items = sum(len(entity.incomplete) for entity in entities)
        console.print(f"[dim]{timestamp}[/dim] {len(entities)} lists, {open_items} open items", highlight=False)

    console.print(f"[bold]Watching[/bold] {'lists' if lists else 'documents'} for {session.user_id}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    subscription = session.subscribe_lists(on_lists) if lists else session.subscribe_docs(on_docs)
    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        console.print()
    finally:
        subscription.cancel()
    console.print(f"[bold]Stopped.[/bold] Saw {seen} snapshots.")
    return seen


def run_history(audit: AuditLog, *, last_n: int | None = None, format: str = "text") -> int:
    """
    Display entries from the audit log.

    Returns the number of entries displayed.
    """
    console = Console()
    entries = audit.read(last_n=last_n)

    if not entries:
        console.print("[dim]No history found.[/dim]")
        return 0

    if format == "json":
        for entry in entries:
            print(json.dumps(entry.to_dict()))
    else:
        for entry in entries:
            console.print(escape(format_audit_entry(entry)), highlight=False)
            console.print()

    return len(entries)
