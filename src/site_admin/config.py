"""Config file loading and auto-discovery for Site Admin.

Searches for ``site-admin.yaml`` in the current directory and parent
directories, parses it, and resolves all relative paths against the
config file's location. Environment variables prefixed with
``SITE_ADMIN_`` override file values (e.g., ``SITE_ADMIN_PORT=9000``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "site-admin.yaml"
ENV_PREFIX = "SITE_ADMIN_"


@dataclass(frozen=True)
class SiteAdminConfig:
    """Parsed Site Admin project configuration."""

    config_path: Path | None = None
    db_path: str = "./site-admin.db"
    tiers_file: str | None = None
    host: str = "127.0.0.1"
    port: int = 8430
    dev_mode: bool = False

    def with_env(self, environ: dict[str, str] | None = None) -> SiteAdminConfig:
        """Return a copy with ``SITE_ADMIN_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for fld in fields(self):
            if fld.name == "config_path":
                continue
            val = environ.get(f"{ENV_PREFIX}{fld.name.upper()}")
            if val is None:
                continue
            if fld.type == "int":
                overrides[fld.name] = int(val)
            elif fld.type == "bool":
                overrides[fld.name] = val.lower() in ("1", "true", "yes")
            else:
                overrides[fld.name] = val
        return replace(self, **overrides)


def find_config(start: Path | None = None) -> Path | None:
    """Walk from *start* (default ``cwd()``) up to the filesystem root.

    Returns the first ``site-admin.yaml`` found, or ``None``.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
) -> SiteAdminConfig:
    """Load a Site Admin config file.

    Resolution order:

    1. Explicit *path* (error if it doesn't exist).
    2. Auto-discover by walking parent directories.
    3. Return an empty ``SiteAdminConfig`` (all defaults).
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).resolve()
        if not config_path.is_file():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
    elif auto_discover:
        config_path = find_config()

    if config_path is None:
        return SiteAdminConfig()

    return _parse_config(config_path)


def _parse_config(config_path: Path) -> SiteAdminConfig:
    """Read and parse a YAML config file, resolving relative paths."""
    text = config_path.read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        raise ValueError(msg)

    base = config_path.parent

    def _resolve(key: str) -> str | None:
        val = data.get(key)
        if val is None:
            return None
        return str((base / val).resolve())

    defaults = SiteAdminConfig()
    return SiteAdminConfig(
        config_path=config_path,
        db_path=_resolve("database") or str((base / defaults.db_path).resolve()),
        tiers_file=_resolve("tiers"),
        host=data.get("host", defaults.host),
        port=int(data.get("port", defaults.port)),
        dev_mode=bool(data.get("dev_mode", defaults.dev_mode)),
    )
