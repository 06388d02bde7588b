"""Derived views over document and checklist snapshots."""

from .collection import filter_docs, filter_lists, group_docs, sort_docs
from .lists import add_item, delete_item, edit_item, move_item, reorder_items, toggle_item
from .relations import backlinks, brief_compare, parse_brief_markets, related_docs
from .workspace import ViewOptions, Workspace, build_workspace

__all__ = [
    "filter_docs",
    "filter_lists",
    "group_docs",
    "sort_docs",
    "add_item",
    "delete_item",
    "edit_item",
    "move_item",
    "reorder_items",
    "toggle_item",
    "backlinks",
    "brief_compare",
    "parse_brief_markets",
    "related_docs",
    "ViewOptions",
    "Workspace",
    "build_workspace",
]
