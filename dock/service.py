"""Application service: authenticated, audited access to one user's notebook.

The store and identity provider are injected; nothing here holds global
state. Checklist mutations read the last stored item sequence, compute the
new one and write it back whole, so two sessions editing the same list
concurrently resolve as last-writer-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date
from typing import Any

from .audit_log import AuditLog
from .content.loader import DEFAULT_LIST_TITLE, DEFAULT_TITLE, doc_from_record, list_from_record
from .content.rich_text import EMPTY_RICH_DOC
from .errors import ValidationError
from .identity import IdentityProvider
from .models import Doc, DocType, ListEntity, ListItem, Status
from .store.base import DocumentStore, Subscription
from .store.records import Record, RecordFilter, make_filter
from .views import lists as list_policy
from .views.collection import sort_docs
from .views.workspace import ViewOptions, Workspace, build_workspace

logger = logging.getLogger(__name__)

SNAPSHOT_FILTER = RecordFilter(status=Status.ACTIVE.value, limit=None)


class DockService:
    """Entry point binding a store, an identity provider and an audit log."""

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        audit: AuditLog | None = None,
        options: ViewOptions | None = None,
    ):
        self.store = store
        self.identity = identity
        self.audit = audit
        self.options = options or ViewOptions()

    def open_session(self, credential: str | None) -> "DockSession":
        """Authenticate ``credential`` before any document access."""
        user_id = self.identity.authenticate(credential)
        logger.debug("Opened session for %s", user_id)
        return DockSession(self.store, user_id, audit=self.audit, options=self.options)

    def close(self) -> None:
        self.store.close()


class DockSession:
    """All operations of one authenticated user."""

    def __init__(
        self,
        store: DocumentStore,
        user_id: str,
        audit: AuditLog | None = None,
        options: ViewOptions | None = None,
    ):
        self.store = store
        self.user_id = user_id
        self.audit = audit
        self.options = options or ViewOptions()

    def _log(self, operation: str, record_id: str, record_type: str, fields: Sequence[str] = (), **metadata: Any) -> None:
        if self.audit is not None:
            self.audit.log_operation(
                operation,
                self.user_id,
                record_id=record_id,
                record_type=record_type,
                fields=list(fields),
                metadata=metadata,
            )

    # Generic record operations

    def create_record(self, payload: Mapping[str, Any]) -> str:
        record_id = self.store.create(self.user_id, payload)
        self._log("create", record_id, str(payload.get("type")), fields=[k for k in payload if k != "type"])
        return record_id

    def get_record(self, record_id: str) -> Record:
        return self.store.get(self.user_id, record_id)

    def list_records(self, type: str | None = None, status: str | None = Status.ACTIVE.value, limit: Any = 50) -> list[Record]:
        return self.store.list(self.user_id, make_filter(type=type, status=status, limit=limit))

    def update_record(self, record_id: str, payload: Mapping[str, Any]) -> Record:
        record = self.store.update(self.user_id, record_id, payload)
        self._log("update", record_id, record.type, fields=list(payload))
        return record

    def delete_record(self, record_id: str, hard: bool = False) -> None:
        """Soft delete by default; ``hard`` removes the record entirely."""
        record = self.store.get(self.user_id, record_id)
        if hard:
            self.store.delete(self.user_id, record_id)
        else:
            self.store.soft_delete(self.user_id, record_id)
        self._log("delete" if hard else "soft-delete", record_id, record.type)

    # Documents

    def create_document(
        self,
        doc_type: DocType | str,
        title: str = "",
        content: str = "",
        tags: Sequence[str] | None = None,
        content_json: dict | None = None,
        is_draft: bool = False,
        meta: Mapping[str, Any] | None = None,
    ) -> str:
        try:
            doc_type = DocType(doc_type)
        except ValueError as e:
            raise ValidationError("Invalid type") from e
        if doc_type == DocType.LIST:
            raise ValidationError("Use create_list for lists")
        return self.create_record(
            {
                "type": doc_type.value,
                "title": (title or "").strip() or DEFAULT_TITLE,
                "body": content or "",
                "tags": list(tags or []),
                "content_json": content_json,
                "is_draft": is_draft,
                "meta": dict(meta or {}),
            }
        )

    def create_note(self) -> str:
        """Start an empty draft note."""
        return self.create_document(DocType.NOTE, content_json=dict(EMPTY_RICH_DOC), is_draft=True)

    def create_journal(self, today: date | None = None) -> str:
        """Start today's draft journal entry."""
        today = today or date.today()
        return self.create_document(
            DocType.JOURNAL,
            title=f"Daily Journal - {today.isoformat()}",
            tags=["journal"],
            content_json=dict(EMPTY_RICH_DOC),
            is_draft=True,
        )

    def save_document(
        self,
        record_id: str,
        title: str | None,
        content: str | None,
        content_json: dict | None = None,
        tags: Sequence[str] | None = None,
    ) -> Record:
        """Replace title, body and tags together and clear the draft flag."""
        return self.update_record(
            record_id,
            {
                "title": (title or "").strip() or DEFAULT_TITLE,
                "body": content or "",
                "content_json": content_json,
                "tags": list(tags or []),
                "is_draft": False,
            },
        )

    def delete_document(self, record_id: str, hard: bool = False) -> None:
        self.delete_record(record_id, hard=hard)

    def discard_draft(self, record_id: str) -> None:
        """Remove a never-saved draft."""
        record = self.store.get(self.user_id, record_id)
        if not record.is_draft:
            raise ValidationError(f"{record_id} is not a draft")
        self.delete_record(record_id, hard=True)

    # Lists

    def create_list(self, title: str = "", texts: Sequence[str] = ()) -> str:
        items = list_policy.build_items(list(texts))
        return self.create_record(
            {
                "type": DocType.LIST.value,
                "title": (title or "").strip() or DEFAULT_LIST_TITLE,
                "items": [item.to_dict() for item in items],
            }
        )

    def create_list_from_items(self, title: str, items: Sequence[ListItem]) -> str:
        return self.create_record(
            {
                "type": DocType.LIST.value,
                "title": (title or "").strip() or DEFAULT_LIST_TITLE,
                "items": [item.to_dict() for item in list_policy.normalize_items(items)],
            }
        )

    def rename_list(self, list_id: str, title: str) -> Record:
        self._require_list(list_id)
        return self.update_record(list_id, {"title": (title or "").strip() or DEFAULT_LIST_TITLE})

    def _require_list(self, list_id: str) -> Record:
        record = self.store.get(self.user_id, list_id)
        if record.type != DocType.LIST.value:
            raise ValidationError(f"{list_id} is not a list")
        return record

    def get_list(self, list_id: str) -> ListEntity:
        return list_from_record(self._require_list(list_id))

    def _mutate_items(self, list_id: str, operation: str, change: Callable[[list[ListItem]], list[ListItem]]) -> ListEntity:
        current = self.get_list(list_id)
        items = change(current.items)
        logger.debug("%s on %s: %d -> %d items", operation, list_id, len(current.items), len(items))
        record = self.store.update(self.user_id, list_id, {"items": [item.to_dict() for item in items]})
        self._log(operation, list_id, record.type, fields=["items"])
        return list_from_record(record)

    def add_list_item(self, list_id: str, text: str) -> ListEntity:
        return self._mutate_items(list_id, "list-item-add", lambda items: list_policy.add_item(items, text))

    def toggle_list_item(self, list_id: str, item_id: str) -> ListEntity:
        return self._mutate_items(list_id, "list-item-toggle", lambda items: list_policy.toggle_item(items, item_id))

    def edit_list_item(self, list_id: str, item_id: str, text: str) -> ListEntity:
        return self._mutate_items(list_id, "list-item-edit", lambda items: list_policy.edit_item(items, item_id, text))

    def delete_list_item(self, list_id: str, item_id: str) -> ListEntity:
        return self._mutate_items(list_id, "list-item-delete", lambda items: list_policy.delete_item(items, item_id))

    def reorder_list_items(self, list_id: str, from_index: int, to_index: int) -> ListEntity:
        return self._mutate_items(
            list_id, "list-item-reorder", lambda items: list_policy.reorder_items(items, from_index, to_index)
        )

    def move_list_item(self, list_id: str, active_id: str, over_id: str) -> ListEntity:
        return self._mutate_items(
            list_id, "list-item-reorder", lambda items: list_policy.move_item(items, active_id, over_id)
        )

    # Snapshots and derived views

    @staticmethod
    def docs_from_records(records: Sequence[Record]) -> list[Doc]:
        return sort_docs(doc_from_record(r) for r in records if r.type != DocType.LIST.value)

    @staticmethod
    def lists_from_records(records: Sequence[Record]) -> list[ListEntity]:
        return [list_from_record(r) for r in records if r.type == DocType.LIST.value]

    def snapshot(self) -> list[Record]:
        return self.store.list(self.user_id, SNAPSHOT_FILTER)

    def docs(self) -> list[Doc]:
        return self.docs_from_records(self.snapshot())

    def lists(self) -> list[ListEntity]:
        return self.lists_from_records(self.snapshot())

    def find_doc(self, ref: str) -> Doc | None:
        """Look up an active document by store id or doc path."""
        return next((doc for doc in self.docs() if ref in (doc.id, doc.path)), None)

    def workspace(self, query: str = "", active_path: str | None = None, active_list_id: str | None = None) -> Workspace:
        records = self.snapshot()
        return build_workspace(
            self.docs_from_records(records),
            self.lists_from_records(records),
            query=query,
            active_path=active_path,
            active_list_id=active_list_id,
            options=self.options,
        )

    def subscribe_docs(self, callback: Callable[[list[Doc]], None]) -> Subscription:
        """Deliver the full document snapshot now and after every change."""
        return self.store.subscribe(self.user_id, SNAPSHOT_FILTER, lambda records: callback(self.docs_from_records(records)))

    def subscribe_lists(self, callback: Callable[[list[ListEntity]], None]) -> Subscription:
        return self.store.subscribe(self.user_id, SNAPSHOT_FILTER, lambda records: callback(self.lists_from_records(records)))
