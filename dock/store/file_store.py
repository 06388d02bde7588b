"""JSON file store with watchdog-driven live snapshots.

All users share one JSON document::

    {"version": 1, "users": {"<uid>": {"<id>": {...record...}}}}

Writes replace the file atomically. Changes made by other processes are
picked up by a watchdog observer and delivered to subscribers as full
snapshots.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..errors import StoreUnavailableError
from .base import BaseStore, SnapshotCallback, Subscription
from .records import Record, RecordFilter

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class StoreFileHandler(FileSystemEventHandler):
    """Forwards changes to the store file to the owning store."""

    def __init__(self, store: "JsonFileStore"):
        super().__init__()
        self.store = store

    def _targets_store(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "")]
        return any(p and Path(os.fsdecode(p)).resolve() == self.store.path for p in paths)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in ("created", "modified", "moved", "closed"):
            return
        if self._targets_store(event):
            self.store.refresh()


class JsonFileStore(BaseStore):
    """Persists records to a single JSON file."""

    def __init__(
        self,
        path: Path,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        super().__init__(clock=clock, id_factory=id_factory)
        self.path = Path(path).resolve()
        self._observer: Observer | None = None

    def _load(self) -> dict[str, dict[str, Record]]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            users = raw.get("users", {})
            return {
                user_id: {record_id: Record.from_dict({**data, "id": record_id}) for record_id, data in records.items()}
                for user_id, records in users.items()
            }
        except (OSError, json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
            raise StoreUnavailableError(f"Cannot read store {self.path}: {e}") from e

    def _save(self, table: dict[str, dict[str, Record]]) -> None:
        payload = {
            "version": STORE_VERSION,
            "users": {
                user_id: {record_id: record.to_dict() for record_id, record in records.items()}
                for user_id, records in table.items()
            },
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".dock-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write store {self.path}: {e}") from e
        logger.debug("wrote %s", self.path)

    def refresh(self) -> None:
        """Re-read the file and deliver snapshots to every subscriber."""
        try:
            self._notify()
        except StoreUnavailableError as e:
            # A half-written file from another process; the next event retries.
            logger.warning("Skipping store refresh: %s", e)

    def subscribe(self, user_id: str, query: RecordFilter, callback: SnapshotCallback) -> Subscription:
        subscription = super().subscribe(user_id, query, callback)
        with self._lock:
            if self._observer is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                observer = Observer()
                observer.schedule(StoreFileHandler(self), str(self.path.parent), recursive=False)
                observer.start()
                self._observer = observer
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        super()._unsubscribe(subscription)
        with self._lock:
            if self._subscriptions or self._observer is None:
                return
            observer, self._observer = self._observer, None
        observer.stop()
        if threading.current_thread() is not observer:
            observer.join()
