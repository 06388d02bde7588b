"""
Configuration for dock.

Supports loading from:
1. Environment variables (highest priority, ``.env`` is loaded first)
2. YAML config file (``--config``, ``DOCK_CONFIG`` or ``./dock.yml``)
3. Default values (fallback)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .views.collection import DEFAULT_EXCLUDED_NOTE_TITLES
from .views.relations import DEFAULT_MARKET_LABELS, DEFAULT_RELATED_LIMIT
from .views.workspace import ViewOptions

DEFAULT_CONFIG_NAME = "dock.yml"
DEFAULT_STORE_PATH = Path(".dock") / "store.json"
DEFAULT_AUDIT_LOG = Path(".dock") / "audit.log"
DEFAULT_CREDENTIAL = "env:DOCK_TOKEN"
LOCAL_USER = "local"


@dataclass(frozen=True)
class DockConfig:
    store_path: Path = DEFAULT_STORE_PATH
    audit_log: Path | None = DEFAULT_AUDIT_LOG
    credential: str = DEFAULT_CREDENTIAL  # secret reference the CLI authenticates with
    identities: dict[str, str] = field(default_factory=dict)  # user id -> secret reference
    markets: tuple[str, ...] = DEFAULT_MARKET_LABELS
    excluded_note_titles: tuple[str, ...] = tuple(sorted(DEFAULT_EXCLUDED_NOTE_TITLES))
    excluded_paths: tuple[str, ...] = ()
    related_limit: int = DEFAULT_RELATED_LIMIT
    snippet_length: int = 120
    default_limit: int = 50

    def identity_map(self) -> dict[str, str]:
        """Configured identities, or a single local user keyed by ``credential``."""
        return dict(self.identities) if self.identities else {LOCAL_USER: self.credential}

    def view_options(self) -> ViewOptions:
        return ViewOptions(
            market_labels=tuple(self.markets),
            excluded_note_titles=frozenset(self.excluded_note_titles),
            excluded_paths=frozenset(self.excluded_paths),
            related_limit=self.related_limit,
            snippet_length=self.snippet_length,
        )


def _str_tuple(data: Mapping[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return tuple(str(v) for v in value if str(v).strip())


def _int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be an integer") from e


def _path(value: Any, base: Path) -> Path:
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else base / path


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    return data


def load_config(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> DockConfig:
    """Build a ``DockConfig`` from defaults, a YAML file and the environment.

    Args:
        path: Explicit config file path
        env: Environment mapping; defaults to ``os.environ`` after loading ``.env``
        cwd: Directory used to locate ``.env``, ``dock.yml`` and relative paths

    Returns:
        The merged configuration
    """
    cwd = cwd or Path.cwd()
    if env is None:
        load_dotenv(cwd / ".env", override=False)
        env = os.environ

    if path is None and env.get("DOCK_CONFIG"):
        path = Path(env["DOCK_CONFIG"])
    if path is None and (cwd / DEFAULT_CONFIG_NAME).is_file():
        path = cwd / DEFAULT_CONFIG_NAME

    data: dict[str, Any] = {}
    base = cwd
    if path is not None:
        path = _path(path, cwd)
        data = read_config_file(path)
        base = path.parent

    identities = data.get("identities") or {}
    if not isinstance(identities, dict):
        raise ConfigError("'identities' must map user ids to secret references")

    audit_value = env.get("DOCK_AUDIT_LOG", data.get("audit_log", DEFAULT_AUDIT_LOG))
    audit_log = None if audit_value in (None, "", False) else _path(audit_value, base)

    return DockConfig(
        store_path=_path(env.get("DOCK_STORE_PATH") or data.get("store_path") or DEFAULT_STORE_PATH, base),
        audit_log=audit_log,
        credential=str(env.get("DOCK_CREDENTIAL") or data.get("credential") or DEFAULT_CREDENTIAL),
        identities={str(k): str(v) for k, v in identities.items()},
        markets=_str_tuple(data, "markets", DEFAULT_MARKET_LABELS),
        excluded_note_titles=_str_tuple(
            data, "excluded_note_titles", tuple(sorted(DEFAULT_EXCLUDED_NOTE_TITLES))
        ),
        excluded_paths=_str_tuple(data, "excluded_paths", ()),
        related_limit=_int(data, "related_limit", DEFAULT_RELATED_LIMIT),
        snippet_length=_int(data, "snippet_length", 120),
        default_limit=_int(data, "default_limit", 50),
    )
