"""Checklist ordering policy.

Items are always kept as ``incomplete + completed``. Each operation takes
the current item sequence and returns a new one; the caller persists the
whole result. Invalid requests (unknown id, blank text, out-of-range
index) return the input order unchanged.
"""

from __future__ import annotations

import json
import re
import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from ..models import ListItem, new_item_id

_CHECKLIST_ITEM = re.compile(r"^\s*[-*+]\s+\[([ xX])\]\s+(.*\S)\s*$")


def _now_ms() -> int:
    return int(time.time() * 1000)


def partition(items: Sequence[ListItem]) -> tuple[list[ListItem], list[ListItem]]:
    """Split items into (incomplete, completed), keeping relative order."""
    incomplete = [item for item in items if not item.completed]
    completed = [item for item in items if item.completed]
    return incomplete, completed


def normalize_items(items: Sequence[ListItem]) -> list[ListItem]:
    """Reorder so every incomplete item precedes every completed one."""
    incomplete, completed = partition(items)
    return incomplete + completed


def add_item(
    items: Sequence[ListItem],
    text: str,
    *,
    now: Callable[[], int] = _now_ms,
    id_factory: Callable[[], str] = new_item_id,
) -> list[ListItem]:
    """Insert a new incomplete item at the front of the list."""
    text = (text or "").strip()
    if not text:
        return normalize_items(items)
    item = ListItem(id=id_factory(), text=text, completed=False, created_at=now())
    incomplete, completed = partition(items)
    return [item, *incomplete, *completed]


def toggle_item(items: Sequence[ListItem], item_id: str) -> list[ListItem]:
    """Flip an item's completion.

    Newly completed items go to the back of the completed partition;
    reopened items go to the front of the incomplete partition.
    """
    target = next((item for item in items if item.id == item_id), None)
    if target is None:
        return normalize_items(items)
    incomplete, completed = partition([item for item in items if item.id != item_id])
    updated = replace(target, completed=not target.completed)
    if updated.completed:
        return [*incomplete, *completed, updated]
    return [updated, *incomplete, *completed]


def edit_item(items: Sequence[ListItem], item_id: str, text: str) -> list[ListItem]:
    """Replace an item's text in place. Blank text is ignored."""
    text = (text or "").strip()
    if not text:
        return normalize_items(items)
    return normalize_items([replace(item, text=text) if item.id == item_id else item for item in items])


def delete_item(items: Sequence[ListItem], item_id: str) -> list[ListItem]:
    return normalize_items([item for item in items if item.id != item_id])


def reorder_items(items: Sequence[ListItem], from_index: int, to_index: int) -> list[ListItem]:
    """Move an incomplete item to another incomplete position.

    Indices address the normalized list. Completed items cannot be moved or
    targeted; such requests and out-of-range indices are ignored.
    """
    incomplete, completed = partition(items)
    bound = len(incomplete)
    if not (0 <= from_index < bound and 0 <= to_index < bound):
        return incomplete + completed
    moved = list(incomplete)
    moved.insert(to_index, moved.pop(from_index))
    return moved + completed


def move_item(items: Sequence[ListItem], active_id: str, over_id: str) -> list[ListItem]:
    """Drag ``active_id`` onto the position held by ``over_id``."""
    incomplete, completed = partition(items)
    ids = [item.id for item in incomplete]
    if active_id == over_id or active_id not in ids or over_id not in ids:
        return incomplete + completed
    return reorder_items(items, ids.index(active_id), ids.index(over_id))


def seed_items_from_checklist(
    markdown: str,
    *,
    now: Callable[[], int] = _now_ms,
    id_factory: Callable[[], str] = new_item_id,
) -> list[ListItem]:
    """Build items from ``- [ ] text`` / ``- [x] text`` markdown lines."""
    created = now()
    items = []
    for line in (markdown or "").splitlines():
        match = _CHECKLIST_ITEM.match(line)
        if not match:
            continue
        items.append(
            ListItem(
                id=id_factory(),
                text=match.group(2).strip(),
                completed=match.group(1) != " ",
                created_at=created,
            )
        )
    return normalize_items(items)


def parse_item_texts(value: str | None) -> list[str]:
    """Split CLI item input: a JSON array, or ``;``/newline separated text.

    Invalid JSON is treated as plain separated text.
    """
    text = (value or "").strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(entry).strip() for entry in parsed if str(entry).strip()]
    return [part.strip() for part in re.split(r";|\n", text) if part.strip()]


def build_items(
    texts: Sequence[str],
    *,
    now: Callable[[], int] = _now_ms,
    id_factory: Callable[[], str] = new_item_id,
) -> list[ListItem]:
    """Fresh incomplete items in the given order."""
    created = now()
    return [ListItem(id=id_factory(), text=text, completed=False, created_at=created) for text in texts]
