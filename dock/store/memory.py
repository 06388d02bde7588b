"""In-process store, used by tests and short-lived sessions."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from .base import BaseStore
from .records import Record


class InMemoryStore(BaseStore):
    """Keeps records in a dict; subscribers are notified synchronously."""

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        super().__init__(clock=clock, id_factory=id_factory)
        self._table: dict[str, dict[str, Record]] = {}

    def _load(self) -> dict[str, dict[str, Record]]:
        return self._table

    def _save(self, table: dict[str, dict[str, Record]]) -> None:
        self._table = table
