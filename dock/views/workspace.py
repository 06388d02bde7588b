"""Full derived view of one snapshot, as the sidebar and side panels show it."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models import BriefComparison, Doc, DocGroups, ListEntity, OutlineEntry, RelatedDoc
from .collection import (
    DEFAULT_EXCLUDED_NOTE_TITLES,
    DocStats,
    ListStats,
    doc_stats,
    filter_docs,
    filter_lists,
    group_docs,
    list_stats,
    sort_docs,
)
from .relations import (
    DEFAULT_MARKET_LABELS,
    DEFAULT_RELATED_LIMIT,
    backlink_snippets,
    backlinks,
    brief_compare,
    related_docs,
)


@dataclass(frozen=True)
class ViewOptions:
    market_labels: tuple[str, ...] = DEFAULT_MARKET_LABELS
    excluded_note_titles: frozenset[str] = DEFAULT_EXCLUDED_NOTE_TITLES
    excluded_paths: frozenset[str] = frozenset()
    related_limit: int = DEFAULT_RELATED_LIMIT
    snippet_length: int = 120


@dataclass
class Workspace:
    docs: list[Doc] = field(default_factory=list)
    filtered: list[Doc] = field(default_factory=list)
    groups: DocGroups = field(default_factory=DocGroups)
    filtered_lists: list[ListEntity] = field(default_factory=list)
    active_doc: Doc | None = None
    active_list: ListEntity | None = None
    outline: list[OutlineEntry] = field(default_factory=list)
    backlinks: list[Doc] = field(default_factory=list)
    snippets: dict[str, str] = field(default_factory=dict)
    related: list[RelatedDoc] = field(default_factory=list)
    brief: BriefComparison | None = None
    doc_stats: DocStats = field(default_factory=DocStats)
    list_stats: ListStats | None = None
    total_count: int = 0
    filtered_count: int = 0


def build_workspace(
    docs: Sequence[Doc],
    lists: Sequence[ListEntity] = (),
    *,
    query: str = "",
    active_path: str | None = None,
    active_list_id: str | None = None,
    options: ViewOptions | None = None,
) -> Workspace:
    """Recompute every derived view from a snapshot.

    The active document is the filtered document matching ``active_path``,
    else the first filtered document. While a list is active there is no
    active document. Relationship views consider the whole snapshot, not
    just the search results.
    """
    options = options or ViewOptions()
    ordered = sort_docs(docs)
    filtered = filter_docs(ordered, query)
    filtered_lists = filter_lists(lists, query)

    active_list = next((entity for entity in lists if entity.id == active_list_id), None) if active_list_id else None
    active_doc = None
    if active_list is None:
        active_doc = next((doc for doc in filtered if doc.path == active_path), None)
        if active_doc is None and filtered:
            active_doc = filtered[0]

    linked = backlinks(ordered, active_doc)
    return Workspace(
        docs=ordered,
        filtered=filtered,
        groups=group_docs(filtered, options.excluded_note_titles, options.excluded_paths),
        filtered_lists=filtered_lists,
        active_doc=active_doc,
        active_list=active_list,
        outline=list(active_doc.outline) if active_doc else [],
        backlinks=linked,
        snippets=backlink_snippets(linked, active_doc, options.snippet_length),
        related=related_docs(ordered, active_doc, options.related_limit),
        brief=brief_compare(ordered, active_doc, options.market_labels),
        doc_stats=doc_stats(active_doc),
        list_stats=list_stats(active_list),
        total_count=len(ordered) + len(lists),
        filtered_count=len(filtered) + len(filtered_lists),
    )
