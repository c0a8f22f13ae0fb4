"""
Settings loader for callback-bridge.

Settings are read from a TOML file. The lookup order is:

1. Explicit ``CALLBACK_BRIDGE_CONFIG`` environment variable.
2. ``.callback_bridge/config.toml`` relative to the current working directory.
3. ``.callback_bridge/config.toml`` relative to the project root (the nearest
   parent of this module holding a ``pyproject.toml``).

Only the ``[bridge]`` table is interpreted::

    [bridge]
    catalog = "catalogs/host.yaml"
    log_level = "DEBUG"
    skip_namespaces = ["debugger"]

Relative ``catalog`` paths resolve against the directory of the settings file.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

ENV_CONFIG_PATH = "CALLBACK_BRIDGE_CONFIG"
CONFIG_DIR = ".callback_bridge"
CONFIG_FILE = "config.toml"


@dataclass(slots=True)
class BridgeSettings:
    """Resolved configuration values."""

    source_path: Optional[Path] = None
    catalog_path: Optional[Path] = None
    log_level: Optional[str] = None
    skip_namespaces: Sequence[str] = field(default_factory=tuple)


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv(ENV_CONFIG_PATH)
    if env_override:
        yield Path(env_override).expanduser()

    seen: set[Path] = set()
    roots = [Path.cwd()]
    project_root = _discover_project_root()
    if project_root:
        roots.append(project_root)
    for base in roots:
        candidate = base / CONFIG_DIR / CONFIG_FILE
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _load_toml(path: Path) -> Dict[str, object]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse settings file '{path}': {exc}") from exc


def _settings_from_payload(payload: Dict[str, object], *, origin: Path) -> BridgeSettings:
    section = payload.get("bridge", {})
    if not isinstance(section, dict):
        section = {}

    catalog_path: Optional[Path] = None
    catalog = section.get("catalog")
    if isinstance(catalog, str) and catalog:
        catalog_path = Path(catalog).expanduser()
        if not catalog_path.is_absolute():
            catalog_path = origin.parent / catalog_path

    log_level = section.get("log_level")
    skip = section.get("skip_namespaces") or ()
    if isinstance(skip, str):
        skip = (skip,)
    elif not isinstance(skip, (list, tuple)):
        raise ValueError(f"'skip_namespaces' in '{origin}' must be a string or a list of strings.")
    return BridgeSettings(
        source_path=origin,
        catalog_path=catalog_path,
        log_level=str(log_level) if isinstance(log_level, str) and log_level else None,
        skip_namespaces=tuple(str(item) for item in skip),
    )


def load_settings(strict: bool = False) -> BridgeSettings:
    """
    Load settings from the first settings file found.

    Parameters
    ----------
    strict:
        When ``True`` a missing settings file raises ``FileNotFoundError``
        instead of returning defaults.
    """

    for path in _candidate_paths():
        if path.is_file():
            return _settings_from_payload(_load_toml(path), origin=path)

    if strict:
        raise FileNotFoundError(f"No settings file found. Configure {ENV_CONFIG_PATH} or {CONFIG_DIR}/{CONFIG_FILE}.")

    return BridgeSettings()


__all__ = ["BridgeSettings", "load_settings"]
