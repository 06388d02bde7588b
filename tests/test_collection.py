from __future__ import annotations

from datetime import datetime, timezone

from dock.models import Doc, DocType, ListEntity, ListItem
from dock.views.collection import (
    DocStats,
    ListStats,
    doc_stats,
    filter_docs,
    filter_lists,
    group_docs,
    list_stats,
    sort_docs,
)


def _day(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


def _doc(title: str, *, updated: datetime | None = None, created: datetime | None = None, **kwargs) -> Doc:
    return Doc(path=kwargs.pop("path", f"note/{title}"), title=title, updated_at=updated, created_at=created, **kwargs)


def test_sort_dated_before_undated() -> None:
    docs = [_doc("B", updated=_day(2)), _doc("A"), _doc("C", updated=_day(5))]
    assert [doc.title for doc in sort_docs(docs)] == ["C", "B", "A"]


def test_sort_undated_alphabetical_and_ties_stable() -> None:
    docs = [
        _doc("zeta"),
        _doc("Alpha"),
        _doc("first", path="p1", updated=_day(3)),
        _doc("second", path="p2", updated=_day(3)),
    ]
    assert [doc.title for doc in sort_docs(docs)] == ["first", "second", "Alpha", "zeta"]


def test_sort_falls_back_to_created_and_leaves_input_alone() -> None:
    docs = [_doc("old", created=_day(1)), _doc("new", created=_day(9))]
    assert [doc.title for doc in sort_docs(docs)] == ["new", "old"]
    assert [doc.title for doc in docs] == ["old", "new"]


def test_group_docs_excludes_reserved_notes_only() -> None:
    docs = [
        _doc("Ideas"),
        _doc("Brief Archive"),
        _doc("The Dock Docs", type=DocType.JOURNAL),
        _doc("Monday", type=DocType.BRIEF),
        _doc("Roadmap", path="notes/roadmap.md"),
    ]
    groups = group_docs(docs, excluded_paths={"notes/roadmap.md"})
    assert [doc.title for doc in groups.notes] == ["Ideas"]
    assert [doc.title for doc in groups.journal] == ["The Dock Docs"]
    assert [doc.title for doc in groups.briefs] == ["Monday"]


def test_filter_blank_query_is_identity() -> None:
    docs = [_doc("One"), _doc("Two")]
    assert filter_docs(docs, "") == docs
    assert filter_docs(docs, "   ") == docs
    assert filter_docs(docs, None) == docs


def test_filter_matches_title_label_and_content() -> None:
    docs = [
        _doc("Groceries", content="milk"),
        _doc("Standup", type=DocType.JOURNAL, content="talked about MILK prices"),
        _doc("Other", content="nothing"),
    ]
    assert [doc.title for doc in filter_docs(docs, "Milk")] == ["Groceries", "Standup"]
    assert [doc.title for doc in filter_docs(docs, "journal /")] == ["Standup"]
    assert [doc.title for doc in filter_docs(docs, "  groc ")] == ["Groceries"]


def test_filter_is_idempotent() -> None:
    docs = [_doc("alpha beta"), _doc("beta"), _doc("gamma")]
    once = filter_docs(docs, "beta")
    assert filter_docs(once, "beta") == once


def test_filter_lists_matches_item_text() -> None:
    lists = [
        ListEntity(id="1", title="Groceries", items=[ListItem(id="a", text="Oat milk")]),
        ListEntity(id="2", title="Chores", items=[ListItem(id="b", text="laundry")]),
    ]
    assert [entity.id for entity in filter_lists(lists, "MILK")] == ["1"]
    assert [entity.id for entity in filter_lists(lists, "chores")] == ["2"]
    assert filter_lists(lists, "") == lists


def test_doc_stats() -> None:
    assert doc_stats(None) == DocStats(words=0, minutes=0)
    assert doc_stats(_doc("empty")) == DocStats(words=0, minutes=1)
    assert doc_stats(_doc("long", content="word " * 450)) == DocStats(words=450, minutes=2)
    assert doc_stats(_doc("half", content="word " * 500)) == DocStats(words=500, minutes=3)


def test_list_stats() -> None:
    entity = ListEntity(
        id="1",
        items=[ListItem(id="a", text="a"), ListItem(id="b", text="b", completed=True)],
    )
    assert list_stats(entity) == ListStats(total=2, completed=1)
    assert list_stats(None) is None
