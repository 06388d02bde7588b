"""Sorting, grouping and substring search over document snapshots.

Every function returns a new list and leaves its inputs untouched.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from ..models import Doc, DocGroups, DocType, ListEntity

DEFAULT_EXCLUDED_NOTE_TITLES = frozenset({"Brief Archive", "The Dock Docs"})

WORDS_PER_MINUTE = 200


def _epoch(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _sort_key(doc: Doc) -> tuple:
    dated = doc.date
    if dated is not None:
        return (0, -_epoch(dated), "")
    return (1, 0.0, doc.title.casefold())


def sort_docs(docs: Iterable[Doc]) -> list[Doc]:
    """Order documents newest first.

    Dated documents (``updated_at``, falling back to ``created_at``) come
    first, newest to oldest; undated ones follow alphabetically by title.
    Ties keep their input order.
    """
    return sorted(docs, key=_sort_key)


def group_docs(
    docs: Iterable[Doc],
    excluded_titles: Iterable[str] = DEFAULT_EXCLUDED_NOTE_TITLES,
    excluded_paths: Iterable[str] = (),
) -> DocGroups:
    """Partition documents by type in a single pass.

    Reserved titles and paths are kept out of the notes bucket only.
    """
    titles = set(excluded_titles)
    paths = set(excluded_paths)
    groups = DocGroups()
    for doc in docs:
        if doc.type == DocType.JOURNAL:
            groups.journal.append(doc)
        elif doc.type == DocType.BRIEF:
            groups.briefs.append(doc)
        elif doc.title not in titles and doc.path not in paths:
            groups.notes.append(doc)
    return groups


def _normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


def filter_docs(docs: Sequence[Doc], query: str | None) -> list[Doc]:
    """Case-insensitive substring match over title, slug and content.

    A blank query returns every document in input order.
    """
    needle = _normalize_query(query)
    if not needle:
        return list(docs)
    return [doc for doc in docs if needle in f"{doc.title} {doc.slug} {doc.content}".lower()]


def filter_lists(lists: Sequence[ListEntity], query: str | None) -> list[ListEntity]:
    """Case-insensitive substring match over list titles and item texts."""
    needle = _normalize_query(query)
    if not needle:
        return list(lists)
    result = []
    for entity in lists:
        item_text = " ".join(item.text for item in entity.items)
        if needle in f"{entity.title} {item_text}".lower():
            result.append(entity)
    return result


@dataclass(frozen=True)
class DocStats:
    words: int = 0
    minutes: int = 0


@dataclass(frozen=True)
class ListStats:
    total: int = 0
    completed: int = 0


def doc_stats(doc: Doc | None) -> DocStats:
    """Word count and reading time (at least one minute) for a document."""
    if doc is None:
        return DocStats()
    words = len(doc.content.split())
    minutes = max(1, math.floor(words / WORDS_PER_MINUTE + 0.5))
    return DocStats(words=words, minutes=minutes)


def list_stats(entity: ListEntity | None) -> ListStats | None:
    if entity is None:
        return None
    return ListStats(total=len(entity.items), completed=sum(1 for item in entity.items if item.completed))
