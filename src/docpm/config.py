"""Configuration: resolved once into an immutable Config value.

Precedence, lowest to highest: built-in defaults, ``docpm.json`` (working
directory first, then home), ``PM_*`` environment variables, explicit
overrides (CLI flags). There is no global settings object; callers pass the
Config they want to the service.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docpm.types.core import ProjectConfig
from docpm.vcs import repo_root

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "docpm.json"
DEFAULT_BACKLOG_DIR = "work-items/backlog"
DEFAULT_COMPLETED_DIR = "work-items/completed"
DEFAULT_PHASE_TIMEOUT_DAYS = 7
# Base directory used when repository detection is turned off.
FALLBACK_BASE_DIR = "wiki"
LOG_SUBDIR = "work-items"

ENV_VARS: dict[str, str] = {
    "base_dir": "PM_BASE_DIR",
    "backlog_dir": "PM_BACKLOG_DIR",
    "completed_dir": "PM_COMPLETED_DIR",
    "auto_detect_repo_root": "PM_AUTO_DETECT_REPO_ROOT",
    "phase_timeout_days": "PM_PHASE_TIMEOUT_DAYS",
    "auto_assign_agent": "PM_AUTO_ASSIGN_AGENT",
    "enable_git": "PM_ENABLE_GIT",
}

_BOOL_KEYS: frozenset[str] = frozenset({"auto_detect_repo_root", "auto_assign_agent", "enable_git"})
_TRUE_STRINGS: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS: frozenset[str] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Config:
    base_dir: Path
    backlog_dir: Path
    completed_dir: Path
    auto_detect_repo_root: bool = True
    phase_timeout_days: int = DEFAULT_PHASE_TIMEOUT_DAYS
    auto_assign_agent: bool = True
    enable_git: bool = False

    @classmethod
    def at(cls, base_dir: Path | str, **kwargs: Any) -> Config:
        """Config rooted at *base_dir* with the default store layout.

        Keyword arguments override individual fields; relative ``backlog_dir``
        and ``completed_dir`` values are joined onto *base_dir*.
        """
        base = Path(base_dir)
        backlog = _under(base, kwargs.pop("backlog_dir", DEFAULT_BACKLOG_DIR))
        completed = _under(base, kwargs.pop("completed_dir", DEFAULT_COMPLETED_DIR))
        return cls(base_dir=base, backlog_dir=backlog, completed_dir=completed, **kwargs)

    @property
    def log_dir(self) -> Path:
        return self.base_dir / LOG_SUBDIR


def _under(base: Path, value: Path | str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base / path


def _as_bool(key: str, value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    logger.warning("Ignoring invalid boolean for %s: %r", key, value)
    return None


def _as_int(key: str, value: object) -> int | None:
    if isinstance(value, bool):
        logger.warning("Ignoring invalid integer for %s: %r", key, value)
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid integer for %s: %r", key, value)
        return None


def _coerce(key: str, value: object) -> object | None:
    """Normalize one raw setting. None means "ignore this layer's value"."""
    if value is None:
        return None
    if key in _BOOL_KEYS:
        return _as_bool(key, value)
    if key == "phase_timeout_days":
        return _as_int(key, value)
    text = str(value).strip()
    return text or None


def read_config_file(path: Path) -> ProjectConfig:
    """Read a docpm.json file. Returns an empty mapping if missing or corrupt."""
    if not path.is_file():
        return ProjectConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s, using defaults: %s", path, exc)
        return ProjectConfig()
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return ProjectConfig()
    result: ProjectConfig = data  # type: ignore[assignment]
    return result


def find_config_file(cwd: Path, home: Path | None = None) -> Path | None:
    """First ``docpm.json`` in *cwd*, then *home*."""
    candidates = [cwd / CONFIG_FILENAME]
    if home is not None:
        candidates.append(home / CONFIG_FILENAME)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _layer(settings: dict[str, object], raw: Mapping[str, object]) -> None:
    for key in ENV_VARS:
        if key in raw:
            value = _coerce(key, raw[key])
            if value is not None:
                settings[key] = value


def load_config(
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
    home: Path | None = None,
) -> Config:
    """Resolve settings from every layer into a Config.

    When no base directory is configured it is the enclosing git repository's
    root (or *cwd* outside a repository), or ``wiki`` under *cwd* when
    repository detection is turned off.
    """
    cwd = cwd or Path.cwd()
    env = os.environ if env is None else env
    if home is None:
        home = Path.home()

    settings: dict[str, object] = {
        "backlog_dir": DEFAULT_BACKLOG_DIR,
        "completed_dir": DEFAULT_COMPLETED_DIR,
        "auto_detect_repo_root": True,
        "phase_timeout_days": DEFAULT_PHASE_TIMEOUT_DAYS,
        "auto_assign_agent": True,
        "enable_git": False,
    }

    config_path = find_config_file(cwd, home)
    if config_path is not None:
        logger.debug("Using config file %s", config_path)
        _layer(settings, dict(read_config_file(config_path)))

    _layer(settings, {key: env[var] for key, var in ENV_VARS.items() if var in env})
    if overrides:
        _layer(settings, overrides)

    base_value = settings.pop("base_dir", None)
    if base_value is not None:
        base_dir = _under(cwd, str(base_value))
    elif settings["auto_detect_repo_root"]:
        base_dir = repo_root(cwd) or cwd
    else:
        base_dir = cwd / FALLBACK_BASE_DIR

    return Config.at(
        base_dir,
        backlog_dir=str(settings["backlog_dir"]),
        completed_dir=str(settings["completed_dir"]),
        auto_detect_repo_root=bool(settings["auto_detect_repo_root"]),
        phase_timeout_days=int(settings["phase_timeout_days"]),  # type: ignore[call-overload]
        auto_assign_agent=bool(settings["auto_assign_agent"]),
        enable_git=bool(settings["enable_git"]),
    )
