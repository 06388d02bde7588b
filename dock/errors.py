"""Exception hierarchy for I/O boundary failures.

Parsing and view-derivation functions never raise; everything here belongs
to the store, identity and configuration layers.
"""


class DockError(Exception):
    """Base class for all dock errors."""


class ValidationError(DockError):
    """A write was rejected before reaching the store."""


class NotFoundError(DockError):
    """An operation targeted a record id that does not exist."""

    def __init__(self, record_id: str, message: str | None = None):
        self.record_id = record_id
        super().__init__(message or f"Not found: {record_id}")


class AuthenticationError(DockError):
    """Missing or invalid credential."""


class StoreUnavailableError(DockError):
    """The backing store could not be read or written."""


class ConfigError(DockError):
    """Configuration file could not be parsed."""
