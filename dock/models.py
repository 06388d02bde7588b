"""Data models for documents, checklists and their derived views."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocType(str, Enum):
    """Record types accepted by the store."""

    NOTE = "note"
    JOURNAL = "journal"
    BRIEF = "brief"
    LIST = "list"


class Status(str, Enum):
    """Lifecycle status of a stored record."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


@dataclass(frozen=True)
class OutlineEntry:
    """A level 2 or 3 heading reference inside one rendered document."""

    level: int
    text: str
    id: str


@dataclass
class Doc:
    """A note, journal entry or brief, normalized for display."""

    path: str  # stable identifier, unique within a loaded set
    title: str = "Untitled"
    content: str = ""  # raw markdown body, front matter stripped
    content_json: dict | None = None  # rich-text source; wins over content when set
    html: str = ""  # derived, never authoritative
    outline: list[OutlineEntry] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    raw_tags: list[str] = field(default_factory=list)  # explicit tags only
    type: DocType = DocType.NOTE
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_draft: bool = False
    id: str | None = None  # store id, when loaded from a store
    source: str = "file"
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def slug(self) -> str:
        """Display label used by search: ``"<type> / <title>"``."""
        return f"{self.type.value} / {self.title}"

    @property
    def is_journal(self) -> bool:
        return self.type == DocType.JOURNAL

    @property
    def is_brief(self) -> bool:
        return self.type == DocType.BRIEF

    @property
    def date(self) -> datetime | None:
        """Recency date: last update, falling back to creation."""
        return self.updated_at or self.created_at


def new_item_id() -> str:
    """Generate a unique list item id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ListItem:
    """One checklist entry."""

    id: str
    text: str
    completed: bool = False
    created_at: int = 0  # epoch milliseconds, for tie-breaking

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListItem":
        """Build an item from its stored shape, tolerating missing fields."""
        created = data.get("createdAt", data.get("created_at", 0))
        try:
            created_at = int(created or 0)
        except (TypeError, ValueError):
            created_at = 0
        return cls(
            id=str(data.get("id") or new_item_id()),
            text=str(data.get("text") or ""),
            completed=bool(data.get("completed", False)),
            created_at=created_at,
        )


@dataclass
class ListEntity:
    """A checklist. Incomplete items always precede completed ones."""

    id: str
    title: str = "Untitled List"
    items: list[ListItem] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def incomplete(self) -> list[ListItem]:
        return [item for item in self.items if not item.completed]

    @property
    def completed(self) -> list[ListItem]:
        return [item for item in self.items if item.completed]


@dataclass(frozen=True)
class MarketFigure:
    """A tracked figure pulled from one line of a brief."""

    raw: str  # the source line with list markers removed
    value: float | None  # None when the number could not be parsed


@dataclass(frozen=True)
class MarketDelta:
    """One row of a day-over-day brief comparison."""

    label: str
    yesterday: float | None
    today: float | None

    @property
    def delta(self) -> float | None:
        if self.today is None or self.yesterday is None:
            return None
        return self.today - self.yesterday


@dataclass(frozen=True)
class BriefComparison:
    """Derived pairing of a brief with its chronological predecessor."""

    today: Doc
    yesterday: Doc
    today_markets: dict[str, MarketFigure]
    yesterday_markets: dict[str, MarketFigure]
    labels: tuple[str, ...] = ()

    def rows(self) -> list[MarketDelta]:
        """One row per tracked label; missing labels yield None values."""
        result = []
        for label in self.labels:
            today = self.today_markets.get(label)
            yesterday = self.yesterday_markets.get(label)
            result.append(
                MarketDelta(
                    label=label,
                    yesterday=yesterday.value if yesterday else None,
                    today=today.value if today else None,
                )
            )
        return result


@dataclass(frozen=True)
class RelatedDoc:
    """A document sharing tags with the active one."""

    doc: Doc
    score: int
    overlap: tuple[str, ...]  # labels as spelled in ``doc.tags``


@dataclass
class DocGroups:
    """Semantic buckets shown in the sidebar."""

    notes: list[Doc] = field(default_factory=list)
    journal: list[Doc] = field(default_factory=list)
    briefs: list[Doc] = field(default_factory=list)
