from __future__ import annotations

from dock.models import ListItem
from dock.views.lists import (
    add_item,
    build_items,
    delete_item,
    edit_item,
    move_item,
    normalize_items,
    parse_item_texts,
    reorder_items,
    seed_items_from_checklist,
    toggle_item,
)


def _ids(*names: str):
    source = iter(names)
    return lambda: next(source)


def _state(items: list[ListItem]) -> list[tuple[str, bool]]:
    return [(item.id, item.completed) for item in items]


def _items(open_ids: str, done_ids: str = "") -> list[ListItem]:
    return [ListItem(id=i, text=i) for i in open_ids] + [ListItem(id=i, text=i, completed=True) for i in done_ids]


def test_add_and_toggle_sequence() -> None:
    ids = _ids("A", "B")
    items: list[ListItem] = []

    items = add_item(items, "A", now=lambda: 1, id_factory=ids)
    assert _state(items) == [("A", False)]

    items = add_item(items, "B", now=lambda: 2, id_factory=ids)
    assert _state(items) == [("B", False), ("A", False)]

    items = toggle_item(items, "B")
    assert _state(items) == [("A", False), ("B", True)]

    items = toggle_item(items, "B")
    assert _state(items) == [("B", False), ("A", False)]


def test_add_goes_before_completed_and_blank_is_ignored() -> None:
    items = _items("a", "z")
    added = add_item(items, "  new  ", now=lambda: 5, id_factory=lambda: "n")
    assert [item.id for item in added] == ["n", "a", "z"]
    assert added[0].text == "new"
    assert added[0].created_at == 5
    assert add_item(items, "   ") == items


def test_toggle_to_completed_goes_to_back() -> None:
    items = _items("abc", "x")
    assert [item.id for item in toggle_item(items, "a")] == ["b", "c", "x", "a"]
    assert toggle_item(items, "missing") == items


def test_edit_keeps_position() -> None:
    items = _items("abc")
    edited = edit_item(items, "b", " Bee ")
    assert [item.text for item in edited] == ["a", "Bee", "c"]
    assert edit_item(items, "b", "  ") == items


def test_delete_from_either_partition() -> None:
    items = _items("ab", "c")
    assert [item.id for item in delete_item(items, "c")] == ["a", "b"]
    assert [item.id for item in delete_item(items, "a")] == ["b", "c"]


def test_reorder_within_incomplete() -> None:
    items = _items("abc", "x")
    assert [item.id for item in reorder_items(items, 0, 2)] == ["b", "c", "a", "x"]
    assert [item.id for item in reorder_items(items, 2, 0)] == ["c", "a", "b", "x"]


def test_reorder_rejects_completed_and_out_of_range_indices() -> None:
    items = _items("abc", "x")
    assert reorder_items(items, 0, 3) == items
    assert reorder_items(items, 3, 0) == items
    assert reorder_items(items, -1, 0) == items
    assert reorder_items(items, 0, 10) == items


def test_move_item_by_id() -> None:
    items = _items("abc", "x")
    assert [item.id for item in move_item(items, "c", "a")] == ["c", "a", "b", "x"]
    assert move_item(items, "x", "a") == items
    assert move_item(items, "a", "a") == items


def test_operations_do_not_mutate_input() -> None:
    items = tuple(_items("ab", "c"))
    toggle_item(items, "a")
    reorder_items(items, 0, 1)
    add_item(items, "new")
    assert [item.id for item in items] == ["a", "b", "c"]
    assert not items[0].completed


def test_normalize_items_puts_open_first() -> None:
    mixed = [ListItem(id="d", text="d", completed=True), ListItem(id="o", text="o")]
    assert [item.id for item in normalize_items(mixed)] == ["o", "d"]


def test_seed_from_checklist() -> None:
    markdown = "# Groceries\n- [ ] milk\n- [x] eggs\n* [X] jam\n- [ ] bread  \nnot an item\n- [ ]   \n"
    items = seed_items_from_checklist(markdown, now=lambda: 7, id_factory=_ids("1", "2", "3", "4"))
    assert [(item.text, item.completed) for item in items] == [
        ("milk", False),
        ("bread", False),
        ("eggs", True),
        ("jam", True),
    ]
    assert {item.created_at for item in items} == {7}


def test_parse_item_texts() -> None:
    assert parse_item_texts("milk; eggs;;\nbread") == ["milk", "eggs", "bread"]
    assert parse_item_texts('["a", " b ", ""]') == ["a", "b"]
    assert parse_item_texts("[not json") == ["[not json"]
    assert parse_item_texts("") == []
    assert parse_item_texts(None) == []


def test_build_items() -> None:
    items = build_items(["a", "b"], now=lambda: 3, id_factory=_ids("i1", "i2"))
    assert [(item.id, item.text, item.completed, item.created_at) for item in items] == [
        ("i1", "a", False, 3),
        ("i2", "b", False, 3),
    ]
