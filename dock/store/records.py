"""Stored record schema and write validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..content.loader import coerce_timestamp
from ..errors import ValidationError
from ..models import DocType, Status

ALLOWED_TYPES = frozenset(t.value for t in DocType)
ALLOWED_STATUS = frozenset(s.value for s in Status)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@dataclass
class Record:
    """A document as the store holds it."""

    id: str
    type: str
    title: str = ""
    body: str = ""
    items: list[dict[str, Any]] = field(default_factory=list)  # list type only
    tags: list[str] = field(default_factory=list)
    status: str = Status.ACTIVE.value
    meta: dict[str, Any] = field(default_factory=dict)  # opaque extension bag
    content_json: dict | None = None
    is_draft: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire shape, with ISO-8601 timestamps."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "tags": list(self.tags),
            "status": self.status,
            "meta": dict(self.meta),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if self.type == DocType.LIST.value:
            data["items"] = [dict(item) for item in self.items]
        if self.content_json is not None:
            data["contentJson"] = self.content_json
        if self.is_draft:
            data["isDraft"] = True
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Record":
        return cls(
            id=str(data["id"]),
            type=str(data.get("type") or DocType.NOTE.value),
            title=str(data.get("title") or ""),
            body=str(data.get("body") or data.get("content") or ""),
            items=[dict(item) for item in data.get("items") or [] if isinstance(item, Mapping)],
            tags=[str(tag) for tag in data.get("tags") or [] if tag],
            status=str(data.get("status") or Status.ACTIVE.value),
            meta=dict(data.get("meta") or {}),
            content_json=data.get("contentJson"),
            is_draft=bool(data.get("isDraft", False)),
            created_at=coerce_timestamp(data.get("createdAt")),
            updated_at=coerce_timestamp(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class RecordFilter:
    """Query over one user's records. ``None`` fields match anything."""

    type: str | None = None
    status: str | None = Status.ACTIVE.value
    limit: int | None = DEFAULT_LIMIT  # None means unbounded

    def matches(self, record: Record) -> bool:
        if self.type is not None and record.type != self.type:
            return False
        if self.status is not None and record.status != self.status:
            return False
        return True


def clamp_limit(limit: Any) -> int:
    """Parse a requested page size; unparseable or zero means the default."""
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        value = DEFAULT_LIMIT
    return min(value, MAX_LIMIT)


def validate_type(value: Any) -> str:
    if value not in ALLOWED_TYPES:
        raise ValidationError("Invalid type")
    return value


def validate_status(value: Any) -> str:
    if value not in ALLOWED_STATUS:
        raise ValidationError("Invalid status")
    return value


def make_filter(type: str | None = None, status: str | None = Status.ACTIVE.value, limit: Any = DEFAULT_LIMIT) -> RecordFilter:
    """Validated ``RecordFilter``."""
    if type is not None:
        validate_type(type)
    if status is not None:
        validate_status(status)
    return RecordFilter(type=type, status=status, limit=clamp_limit(limit))


def _clean_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError("tags must be a list")
    return [str(tag).strip() for tag in value if tag and str(tag).strip()]


def _clean_items(value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, Mapping) for item in value):
        raise ValidationError("items must be a list of objects")
    return [dict(item) for item in value]


def _clean_meta(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("meta must be an object")
    return dict(value)


def _clean_content_json(value: Any) -> dict | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("contentJson must be an object")
    return dict(value)


def sanitize_record_input(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a create payload and return the fields to store.

    ``body`` and ``content`` are accepted as synonyms. Nothing is written
    when validation fails.
    """
    record_type = validate_type(payload.get("type"))
    title = payload.get("title")
    body = payload.get("body", payload.get("content"))
    status = payload.get("status")
    return {
        "type": record_type,
        "title": title.strip() if isinstance(title, str) else "",
        "body": body if isinstance(body, str) else "",
        "items": _clean_items(payload.get("items")),
        "tags": _clean_tags(payload.get("tags")),
        "status": validate_status(status) if status is not None else Status.ACTIVE.value,
        "meta": _clean_meta(payload.get("meta")),
        "content_json": _clean_content_json(payload.get("content_json", payload.get("contentJson"))),
        "is_draft": bool(payload.get("is_draft", payload.get("isDraft", False))),
    }


def sanitize_updates(payload: Mapping[str, Any], current_type: str | None = None) -> dict[str, Any]:
    """Validate a partial update; only keys present in ``payload`` are kept.

    The record type is immutable: any ``type`` differing from
    ``current_type`` is rejected.
    """
    if "type" in payload and payload["type"] != current_type:
        raise ValidationError("type is immutable")

    updates: dict[str, Any] = {}
    if "title" in payload:
        updates["title"] = str(payload["title"] if payload["title"] is not None else "")
    if "body" in payload or "content" in payload:
        body = payload.get("body", payload.get("content"))
        updates["body"] = str(body if body is not None else "")
    if "tags" in payload:
        updates["tags"] = _clean_tags(payload["tags"])
    if "status" in payload:
        updates["status"] = validate_status(payload["status"])
    if "meta" in payload:
        updates["meta"] = _clean_meta(payload["meta"])
    if "items" in payload:
        updates["items"] = _clean_items(payload["items"])
    if "content_json" in payload or "contentJson" in payload:
        updates["content_json"] = _clean_content_json(payload.get("content_json", payload.get("contentJson")))
    if "is_draft" in payload or "isDraft" in payload:
        updates["is_draft"] = bool(payload.get("is_draft", payload.get("isDraft")))
    return updates
