"""Persistence contract shared by the store implementations.

Every operation is scoped by user id: one user's records are invisible to
another. Timestamps are assigned by the store and never move backwards for
a given record.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Protocol

from ..errors import NotFoundError
from ..models import Status
from .records import Record, RecordFilter, sanitize_record_input, sanitize_updates

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Record]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore(Protocol):
    """Protocol for record persistence."""

    def create(self, user_id: str, payload: Mapping[str, Any]) -> str: ...

    def list(self, user_id: str, query: RecordFilter) -> list[Record]: ...

    def get(self, user_id: str, record_id: str) -> Record: ...

    def update(self, user_id: str, record_id: str, payload: Mapping[str, Any]) -> Record: ...

    def soft_delete(self, user_id: str, record_id: str) -> Record: ...

    def delete(self, user_id: str, record_id: str) -> None: ...

    def subscribe(self, user_id: str, query: RecordFilter, callback: SnapshotCallback) -> "Subscription": ...

    def close(self) -> None: ...


class Subscription:
    """Handle for a live snapshot stream. ``cancel()`` stops delivery."""

    def __init__(self, store: "BaseStore", user_id: str, query: RecordFilter, callback: SnapshotCallback):
        self.store = store
        self.user_id = user_id
        self.query = query
        self.callback = callback
        self.active = True
        self._last_key: str | None = None
        self._lock = threading.RLock()

    def deliver(self, snapshot: list[Record]) -> None:
        """Send a snapshot unless it is identical to the previous one."""
        key = json.dumps([record.to_dict() for record in snapshot], sort_keys=True, default=str)
        with self._lock:
            if not self.active or key == self._last_key:
                return
            self._last_key = key
            self.callback(snapshot)

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.store._unsubscribe(self)


class BaseStore(ABC):
    """Record operations over an abstract ``user -> id -> Record`` table."""

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._clock = clock or utc_now
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex[:20])
        self._subscriptions: list[Subscription] = []
        self._lock = threading.RLock()

    @abstractmethod
    def _load(self) -> dict[str, dict[str, Record]]:
        """Return the current table."""

    @abstractmethod
    def _save(self, table: dict[str, dict[str, Record]]) -> None:
        """Persist the table."""

    def _now(self) -> datetime:
        now = self._clock()
        return now if now.tzinfo else now.replace(tzinfo=timezone.utc)

    def _touch(self, record: Record) -> None:
        now = self._now()
        if record.updated_at is not None and record.updated_at > now:
            now = record.updated_at
        record.updated_at = now

    def _require(self, table: dict[str, dict[str, Record]], user_id: str, record_id: str) -> Record:
        record = table.get(user_id, {}).get(record_id)
        if record is None:
            raise NotFoundError(record_id)
        return record

    def create(self, user_id: str, payload: Mapping[str, Any]) -> str:
        fields = sanitize_record_input(payload)
        with self._lock:
            table = self._load()
            now = self._now()
            record_id = self._id_factory()
            table.setdefault(user_id, {})[record_id] = Record(
                id=record_id, created_at=now, updated_at=now, **fields
            )
            self._save(table)
        logger.debug("created %s %s for %s", fields["type"], record_id, user_id)
        self._notify(user_id)
        return record_id

    def list(self, user_id: str, query: RecordFilter) -> list[Record]:
        """Matching records, most recently updated first."""
        with self._lock:
            records = [r for r in self._load().get(user_id, {}).values() if query.matches(r)]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        records.sort(key=lambda r: r.updated_at or epoch, reverse=True)
        if query.limit is not None:
            records = records[: query.limit]
        return [copy.deepcopy(r) for r in records]

    def get(self, user_id: str, record_id: str) -> Record:
        with self._lock:
            return copy.deepcopy(self._require(self._load(), user_id, record_id))

    def update(self, user_id: str, record_id: str, payload: Mapping[str, Any]) -> Record:
        """Merge validated fields into a record and refresh ``updated_at``."""
        with self._lock:
            table = self._load()
            record = self._require(table, user_id, record_id)
            for key, value in sanitize_updates(payload, record.type).items():
                setattr(record, key, value)
            self._touch(record)
            self._save(table)
            result = copy.deepcopy(record)
        self._notify(user_id)
        return result

    def soft_delete(self, user_id: str, record_id: str) -> Record:
        """Mark a record deleted without removing it."""
        with self._lock:
            table = self._load()
            record = self._require(table, user_id, record_id)
            record.status = Status.DELETED.value
            self._touch(record)
            self._save(table)
            result = copy.deepcopy(record)
        self._notify(user_id)
        return result

    def delete(self, user_id: str, record_id: str) -> None:
        """Physically remove a record."""
        with self._lock:
            table = self._load()
            self._require(table, user_id, record_id)
            del table[user_id][record_id]
            self._save(table)
        self._notify(user_id)

    def subscribe(self, user_id: str, query: RecordFilter, callback: SnapshotCallback) -> Subscription:
        """Deliver the matching snapshot now and after every change."""
        subscription = Subscription(self, user_id, query, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        subscription.deliver(self.list(user_id, query))
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _notify(self, user_id: str | None = None) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if user_id is None or s.user_id == user_id]
        for subscription in targets:
            subscription.deliver(self.list(subscription.user_id, subscription.query))

    def close(self) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.cancel()
