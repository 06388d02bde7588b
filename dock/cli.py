"""CLI entrypoint for dock."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .errors import DockError

RECORD_TYPES = ["note", "journal", "brief", "list"]
STATUS_CHOICES = ["active", "archived", "deleted", "any"]


@contextmanager
def _errors():
    """Turn dock and I/O failures into a one-line message and exit code 1."""
    try:
        yield
    except (DockError, OSError) as e:
        raise click.ClickException(str(e)) from e


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _service(ctx: click.Context):
    from .audit_log import AuditLog
    from .identity import TokenIdentityProvider
    from .service import DockService
    from .store.file_store import JsonFileStore

    config = ctx.obj["config"]
    service = DockService(
        JsonFileStore(config.store_path),
        TokenIdentityProvider(config.identity_map()),
        audit=AuditLog(config.audit_log) if config.audit_log else None,
        options=config.view_options(),
    )
    ctx.call_on_close(service.close)
    return service


def _session(ctx: click.Context):
    """Open a session authenticated with the configured credential."""
    from .secrets import CompositeSecretsProvider

    config = ctx.obj["config"]
    credential = CompositeSecretsProvider().get(config.credential)
    return _service(ctx).open_session(credential)


@click.group()
@click.version_option(__version__, prog_name="dock")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config file (defaults to $DOCK_CONFIG or ./dock.yml)",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the JSON store file (overrides config)",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, store_path: Path | None, verbose: bool) -> None:
    """dock - notes, journal entries, briefs and checklists.

    Credentials are read from the reference in config (default env:DOCK_TOKEN).
    """
    from .config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    with _errors():
        config = load_config(config_path)
    if store_path is not None:
        config = replace(config, store_path=store_path)
    ctx.obj["config"] = config


@cli.command()
@click.argument("record_type", metavar="TYPE", type=click.Choice(RECORD_TYPES))
@click.option("--title", default=None, help="Record title")
@click.option("--content", default=None, help="Markdown body")
@click.option("--file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="Read the body from a file")
@click.option("--tags", default=None, help="Comma separated tags")
@click.option("--items", default=None, help='List items: "a;b;c" or a JSON array')
@click.option("--draft", is_flag=True, help="Mark the document as a draft")
@click.pass_context
def create(
    ctx: click.Context,
    record_type: str,
    title: str | None,
    content: str | None,
    file: Path | None,
    tags: str | None,
    items: str | None,
    draft: bool,
) -> None:
    """Create a record.

    Examples:

        dock create note --title "Ideas" --content "See #plans"

        dock create list --title Groceries --items "milk;eggs"
    """
    from .commands.records_cmd import run_create

    with _errors():
        run_create(
            _session(ctx),
            record_type,
            title=title,
            content=content,
            file=file,
            tags=tags,
            items=items,
            draft=draft,
        )


@cli.command()
@click.argument("record_type", metavar="TYPE", type=click.Choice(RECORD_TYPES))
@click.option("--id", "record_id", required=True, help="Record id")
@click.option("--title", default=None)
@click.option("--content", default=None)
@click.option("--file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--tags", default=None, help="Comma separated tags (replaces existing)")
@click.option("--items", default=None, help="List items (replaces existing)")
@click.option("--status", type=click.Choice(STATUS_CHOICES[:-1]), default=None)
@click.pass_context
def update(
    ctx: click.Context,
    record_type: str,
    record_id: str,
    title: str | None,
    content: str | None,
    file: Path | None,
    tags: str | None,
    items: str | None,
    status: str | None,
) -> None:
    """Update fields of an existing record."""
    from .commands.records_cmd import run_update

    with _errors():
        run_update(
            _session(ctx),
            record_type,
            record_id,
            title=title,
            content=content,
            file=file,
            tags=tags,
            items=items,
            status=status,
        )


@cli.command()
@click.argument("record_type", metavar="TYPE", type=click.Choice(RECORD_TYPES))
@click.option("--id", "record_id", required=True, help="Record id")
@click.option("--hard", is_flag=True, help="Remove the record instead of marking it deleted")
@click.pass_context
def delete(ctx: click.Context, record_type: str, record_id: str, hard: bool) -> None:
    """Delete a record (soft delete unless --hard)."""
    from .commands.records_cmd import run_delete

    with _errors():
        run_delete(_session(ctx), record_type, record_id, hard=hard)


@cli.command()
@click.argument("record_type", metavar="TYPE", type=click.Choice(RECORD_TYPES))
@click.option("--id", "record_id", required=True, help="Record id")
@click.pass_context
def get(ctx: click.Context, record_type: str, record_id: str) -> None:
    """Print one record as JSON."""
    from .commands.records_cmd import run_get

    with _errors():
        run_get(_session(ctx), record_type, record_id)


@cli.command("list")
@click.argument("record_type", metavar="TYPE", type=click.Choice(RECORD_TYPES))
@click.option("--limit", type=int, default=None, help="Maximum records (default from config, at most 200)")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default="active", help="Status filter")
@click.pass_context
def list_cmd(ctx: click.Context, record_type: str, limit: int | None, status: str) -> None:
    """List records of one type as JSON, most recently updated first."""
    from .commands.records_cmd import run_list

    limit = limit if limit is not None else ctx.obj["config"].default_limit
    with _errors():
        run_list(_session(ctx), record_type, limit=limit, status=None if status == "any" else status)


@cli.command()
@click.argument("ref")
@click.pass_context
def show(ctx: click.Context, ref: str) -> None:
    """Show a document (by id or path) with outline, backlinks and related docs, or a list."""
    from .commands.show import run_show

    with _errors():
        run_show(_session(ctx), ref)


@cli.command()
@click.argument("query", default="")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Search titles, paths and bodies (case-insensitive substring)."""
    from .commands.show import run_search

    with _errors():
        run_search(_session(ctx), query)


@cli.command("import")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.pass_context
def import_cmd(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Import markdown files or folders into the store.

    Checklist-only files become lists.
    """
    from .commands.transfer import run_import

    with _errors():
        run_import(_session(ctx), list(paths))


@cli.command("export")
@click.argument("out_dir", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def export_cmd(ctx: click.Context, out_dir: Path) -> None:
    """Export active records as markdown files with front matter."""
    from .commands.transfer import run_export

    with _errors():
        run_export(_session(ctx), out_dir)


@cli.command()
@click.option("--lists", is_flag=True, help="Watch checklists instead of documents")
@click.pass_context
def watch(ctx: click.Context, lists: bool) -> None:
    """Print a line for every change to the store until Ctrl+C."""
    from .commands.watch_cmd import run_watch

    with _errors():
        run_watch(_session(ctx), lists=lists)


@cli.command()
@click.option("--last", "-n", "last_n", type=int, default=None, help="Show only the last N entries")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def history(ctx: click.Context, last_n: int | None, output_format: str) -> None:
    """Show the audit log of store mutations."""
    from .audit_log import AuditLog
    from .commands.watch_cmd import run_history

    config = ctx.obj["config"]
    if config.audit_log is None:
        raise click.ClickException("Audit log is disabled in config.")
    with _errors():
        run_history(AuditLog(config.audit_log), last_n=last_n, format=output_format)


@cli.group()
def item() -> None:
    """Checklist item commands.

    ITEM is an item id or the position of an open item (0-based).
    """
    pass


@item.command("add")
@click.argument("list_id")
@click.argument("text")
@click.pass_context
def item_add(ctx: click.Context, list_id: str, text: str) -> None:
    """Add an item to the top of a list."""
    from .commands.items_cmd import run_item_add

    with _errors():
        run_item_add(_session(ctx), list_id, text)


@item.command("toggle")
@click.argument("list_id")
@click.argument("ref", metavar="ITEM")
@click.pass_context
def item_toggle(ctx: click.Context, list_id: str, ref: str) -> None:
    """Complete or reopen an item."""
    from .commands.items_cmd import run_item_toggle

    with _errors():
        run_item_toggle(_session(ctx), list_id, ref)


@item.command("edit")
@click.argument("list_id")
@click.argument("ref", metavar="ITEM")
@click.argument("text")
@click.pass_context
def item_edit(ctx: click.Context, list_id: str, ref: str, text: str) -> None:
    """Change an item's text."""
    from .commands.items_cmd import run_item_edit

    with _errors():
        run_item_edit(_session(ctx), list_id, ref, text)


@item.command("delete")
@click.argument("list_id")
@click.argument("ref", metavar="ITEM")
@click.pass_context
def item_delete(ctx: click.Context, list_id: str, ref: str) -> None:
    """Remove an item."""
    from .commands.items_cmd import run_item_delete

    with _errors():
        run_item_delete(_session(ctx), list_id, ref)


@item.command("move")
@click.argument("list_id")
@click.argument("from_index", type=int)
@click.argument("to_index", type=int)
@click.pass_context
def item_move(ctx: click.Context, list_id: str, from_index: int, to_index: int) -> None:
    """Move an open item from one position to another."""
    from .commands.items_cmd import run_item_move

    with _errors():
        run_item_move(_session(ctx), list_id, from_index, to_index)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
