"""dock - note, journal and checklist engine for The Dock."""

__version__ = "0.1.3"
