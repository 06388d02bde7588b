"""Credential references.

Config never holds a token itself. It holds a reference such as
``env:DOCK_TOKEN`` or ``file:~/.config/dock/token`` that is resolved when a
session is opened.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol


class SecretsProvider(Protocol):
    def supports(self, ref: str) -> bool: ...

    def get(self, ref: str) -> str | None:
        """Return the token behind ``ref``, or None when it is unset or empty."""
        ...


def _split(ref: str) -> tuple[str, str]:
    scheme, sep, key = (ref or "").partition(":")
    return (scheme, key) if sep else ("", ref or "")


class EnvSecretsProvider:
    """``env:NAME`` looks up an environment variable."""

    scheme = "env"

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ

    def supports(self, ref: str) -> bool:
        return _split(ref)[0] == self.scheme

    def get(self, ref: str) -> str | None:
        scheme, name = _split(ref)
        if scheme != self.scheme:
            return None
        environ = os.environ if self._environ is None else self._environ
        return (environ.get(name) or "").strip() or None


class FileSecretsProvider:
    """``file:PATH`` reads a token file; relative paths resolve against ``base``."""

    scheme = "file"

    def __init__(self, base: Path | None = None):
        self.base = base

    def supports(self, ref: str) -> bool:
        return _split(ref)[0] == self.scheme

    def get(self, ref: str) -> str | None:
        scheme, raw = _split(ref)
        if scheme != self.scheme or not raw:
            return None
        path = Path(raw).expanduser()
        if not path.is_absolute() and self.base is not None:
            path = self.base / path
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8").strip() or None


class CompositeSecretsProvider:
    """First provider that supports a reference and yields a value wins."""

    def __init__(self, providers: list[SecretsProvider] | None = None):
        self.providers = providers or [EnvSecretsProvider(), FileSecretsProvider()]

    def supports(self, ref: str) -> bool:
        return any(p.supports(ref) for p in self.providers)

    def get(self, ref: str) -> str | None:
        values = (p.get(ref) for p in self.providers if p.supports(ref))
        return next((v for v in values if v is not None), None)


def resolve_secrets(refs: Mapping[str, str], provider: SecretsProvider | None = None) -> dict[str, str]:
    """Resolve ``{user_id: ref}`` to ``{user_id: token}``, dropping unresolved users."""
    provider = provider or CompositeSecretsProvider()
    resolved = {user_id: provider.get(ref) for user_id, ref in refs.items()}
    return {user_id: token for user_id, token in resolved.items() if token is not None}
