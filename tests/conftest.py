"""Pytest configuration and fixtures."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dock.audit_log import AuditLog
from dock.identity import TokenIdentityProvider
from dock.secrets import EnvSecretsProvider
from dock.service import DockService, DockSession
from dock.store.memory import InMemoryStore

ALICE_TOKEN = "alice-secret"
BOB_TOKEN = "bob-secret"


class TickingClock:
    """Returns ``start`` on the first call and one second later on each next call."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def id_factory():
    """Predictable record ids: rec-001, rec-002, ..."""
    counter = itertools.count(1)
    return lambda: f"rec-{next(counter):03d}"


@pytest.fixture
def store(clock: TickingClock, id_factory) -> InMemoryStore:
    return InMemoryStore(clock=clock, id_factory=id_factory)


@pytest.fixture
def identity() -> TokenIdentityProvider:
    """Two users whose tokens come from a fake environment."""
    secrets = EnvSecretsProvider({"ALICE_TOKEN": ALICE_TOKEN, "BOB_TOKEN": BOB_TOKEN})
    return TokenIdentityProvider({"alice": "env:ALICE_TOKEN", "bob": "env:BOB_TOKEN"}, secrets=secrets)


@pytest.fixture
def audit(tmp_path: Path) -> AuditLog:
    return AuditLog(tmp_path / "audit.log")


@pytest.fixture
def service(store: InMemoryStore, identity: TokenIdentityProvider, audit: AuditLog) -> DockService:
    return DockService(store, identity, audit=audit)


@pytest.fixture
def session(service: DockService) -> DockSession:
    """Authenticated session for alice."""
    return service.open_session(ALICE_TOKEN)
