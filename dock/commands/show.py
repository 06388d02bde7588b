"""Show and search commands - render workspace views in the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ..errors import NotFoundError
from ..models import BriefComparison, Doc, ListEntity
from ..service import DockSession
from ..views.workspace import Workspace


def _fmt_date(doc: Doc) -> str:
    return doc.date.strftime("%Y-%m-%d %H:%M") if doc.date else "-"


def _fmt_number(value: float | None) -> str:
    return "-" if value is None else f"{value:,.2f}"


def _print_brief(console: Console, brief: BriefComparison) -> None:
    table = Table(title=f"Markets: {escape(brief.today.title)} vs {escape(brief.yesterday.title)}")
    table.add_column("Market")
    table.add_column("Yesterday", justify="right")
    table.add_column("Today", justify="right")
    table.add_column("Delta", justify="right")
    for row in brief.rows():
        delta = row.delta
        if delta is None:
            delta_text = "-"
        else:
            color = "green" if delta >= 0 else "red"
            delta_text = f"[{color}]{delta:+,.2f}[/{color}]"
        table.add_row(escape(row.label), _fmt_number(row.yesterday), _fmt_number(row.today), delta_text)
    console.print(table)


def _print_doc(console: Console, doc: Doc, ws: Workspace) -> None:
    console.print(f"[bold]{escape(doc.title)}[/bold]  [dim]{escape(doc.slug)}[/dim]", highlight=False)
    console.print(f"  Path: {escape(doc.path)}", highlight=False)
    console.print(f"  Updated: {_fmt_date(doc)}")
    if doc.is_draft:
        console.print("  [yellow]Draft[/yellow]")
    if doc.tags:
        console.print(f"  Tags: {escape(', '.join('#' + tag for tag in doc.tags))}", highlight=False)
    console.print(f"  {ws.doc_stats.words} words, {ws.doc_stats.minutes} min read")
    console.print()

    if ws.outline:
        tree = Tree("[bold]Outline[/bold]")
        parent = tree
        for entry in ws.outline:
            if entry.level == 2:
                parent = tree.add(f"{escape(entry.text)} [dim]#{entry.id}[/dim]")
            else:
                parent.add(f"{escape(entry.text)} [dim]#{entry.id}[/dim]")
        console.print(tree)
        console.print()

    if ws.brief is not None:
        _print_brief(console, ws.brief)
        console.print()

    if ws.backlinks:
        console.print("[bold]Backlinks[/bold]")
        for linked in ws.backlinks:
            console.print(f"  {escape(linked.title)}", highlight=False)
            snippet = ws.snippets.get(linked.path)
            if snippet:
                console.print(f"    [dim]{escape(snippet)}[/dim]", highlight=False)
        console.print()

    if ws.related:
        console.print("[bold]Related[/bold]")
        for entry in ws.related:
            shared = escape(", ".join(entry.overlap))
            console.print(f"  {escape(entry.doc.title)} [dim]({entry.score}: {shared})[/dim]", highlight=False)


def print_list(console: Console, entity: ListEntity) -> None:
    done = len(entity.completed)
    console.print(f"[bold]{escape(entity.title)}[/bold]  [dim]{done}/{len(entity.items)} done[/dim]", highlight=False)
    for index, item in enumerate(entity.incomplete):
        console.print(f"  {index:>2}. [ ] {escape(item.text)} [dim]{escape(item.id)}[/dim]", highlight=False)
    for item in entity.completed:
        console.print(f"      [dim]\\[x] {escape(item.text)} {escape(item.id)}[/dim]", highlight=False)


def run_show(session: DockSession, ref: str) -> Workspace:
    """Show one document with its outline and related views, or one list.

    ``ref`` is a store id or a doc path such as ``dock:note/<id>``.
    """
    console = Console()
    doc = session.find_doc(ref)
    if doc is not None:
        ws = session.workspace(active_path=doc.path)
        _print_doc(console, doc, ws)
        return ws

    entity = next((e for e in session.lists() if e.id == ref), None)
    if entity is None:
        raise NotFoundError(ref)
    ws = session.workspace(active_list_id=entity.id)
    print_list(console, entity)
    return ws


def run_search(session: DockSession, query: str) -> Workspace:
    """List matching documents grouped as the sidebar groups them."""
    console = Console()
    ws = session.workspace(query=query)

    for label, docs in (("Notes", ws.groups.notes), ("Journal", ws.groups.journal), ("Briefs", ws.groups.briefs)):
        if not docs:
            continue
        table = Table(title=label, title_justify="left")
        table.add_column("Title")
        table.add_column("Updated")
        table.add_column("Tags")
        table.add_column("Path", style="dim")
        for doc in docs:
            table.add_row(escape(doc.title), _fmt_date(doc), escape(", ".join(doc.tags)), escape(doc.path))
        console.print(table)

    if ws.filtered_lists:
        table = Table(title="Lists", title_justify="left")
        table.add_column("Title")
        table.add_column("Open", justify="right")
        table.add_column("Id", style="dim")
        for entity in ws.filtered_lists:
            table.add_row(escape(entity.title), str(len(entity.incomplete)), escape(entity.id))
        console.print(table)

    console.print(f"[dim]{ws.filtered_count} of {ws.total_count} shown[/dim]")
    return ws
