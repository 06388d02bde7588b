"""Persistence collaborators."""

from .base import BaseStore, DocumentStore, Subscription
from .file_store import JsonFileStore
from .memory import InMemoryStore
from .records import Record, RecordFilter, make_filter, sanitize_record_input, sanitize_updates

__all__ = [
    "BaseStore",
    "DocumentStore",
    "Subscription",
    "JsonFileStore",
    "InMemoryStore",
    "Record",
    "RecordFilter",
    "make_filter",
    "sanitize_record_input",
    "sanitize_updates",
]
