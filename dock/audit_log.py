"""JSON Lines audit trail of store mutations.

The store keeps only the latest state of each record; this log keeps who
changed what, one JSON object per line, in the order the service issued
the writes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    timestamp: str
    operation: str  # create, update, soft-delete, delete, list-item-*
    user_id: str
    record_id: str | None = None
    record_type: str | None = None
    fields: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditEntry:
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values.setdefault("user_id", "")
        values["fields"] = list(values.get("fields") or [])
        values["metadata"] = dict(values.get("metadata") or {})
        return cls(**values)


class AuditLog:
    """Append-only log file; parent directories are created on first write."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def log_operation(
        self,
        operation: str,
        user_id: str,
        record_id: str | None = None,
        record_type: str | None = None,
        fields: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """Append one entry stamped with the current UTC time and return it.

        ``fields`` names the record fields the operation wrote; they are
        stored sorted.
        """
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=operation,
            user_id=user_id,
            record_id=record_id,
            record_type=record_type,
            fields=sorted(fields or []),
            metadata=dict(metadata or {}),
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")
        return entry

    def read(self, last_n: int | None = None) -> list[AuditEntry]:
        """Entries oldest first; lines that are not valid entries are logged and skipped."""
        if not self.path.exists() or (last_n is not None and last_n <= 0):
            return []
        entries: list[AuditEntry] = []
        for lineno, line in enumerate(self.path.read_text(encoding="utf-8").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
                entries.append(AuditEntry.from_dict(data))
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.warning("%s:%d: skipping malformed audit entry (%s)", self.path, lineno, e)
        return entries if last_n is None else entries[-last_n:]


def format_audit_entry(entry: AuditEntry) -> str:
    head = f"[{entry.timestamp}] {entry.operation}"
    if entry.record_id:
        head += f" {entry.record_type or 'record'} {entry.record_id}"
    lines = [f"{head} ({entry.user_id})"]
    if entry.fields:
        lines.append("  Fields: " + ", ".join(entry.fields))
    lines.extend(f"  {key}: {value}" for key, value in entry.metadata.items())
    return "\n".join(lines)
