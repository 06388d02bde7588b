"""Checklist item commands."""

from __future__ import annotations

from rich.console import Console

from ..errors import NotFoundError
from ..models import ListEntity
from ..service import DockSession
from .show import print_list


def _item_id(entity: ListEntity, ref: str) -> str:
    """Resolve an item id, or a position among the open items."""
    if any(item.id == ref for item in entity.items):
        return ref
    if ref.isdigit():
        incomplete = entity.incomplete
        index = int(ref)
        if index < len(incomplete):
            return incomplete[index].id
    raise NotFoundError(ref, f"No item {ref} in list {entity.id}")


def run_item_add(session: DockSession, list_id: str, text: str) -> ListEntity:
    entity = session.add_list_item(list_id, text)
    print_list(Console(), entity)
    return entity


def run_item_toggle(session: DockSession, list_id: str, ref: str) -> ListEntity:
    entity = session.toggle_list_item(list_id, _item_id(session.get_list(list_id), ref))
    print_list(Console(), entity)
    return entity


def run_item_edit(session: DockSession, list_id: str, ref: str, text: str) -> ListEntity:
    entity = session.edit_list_item(list_id, _item_id(session.get_list(list_id), ref), text)
    print_list(Console(), entity)
    return entity


def run_item_delete(session: DockSession, list_id: str, ref: str) -> ListEntity:
    entity = session.delete_list_item(list_id, _item_id(session.get_list(list_id), ref))
    print_list(Console(), entity)
    return entity


def run_item_move(session: DockSession, list_id: str, from_index: int, to_index: int) -> ListEntity:
    """Move an open item between positions; out-of-range moves change nothing."""
    entity = session.reorder_list_items(list_id, from_index, to_index)
    print_list(Console(), entity)
    return entity
