from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from lazytask.core.fuzzy import DEFAULT_THRESHOLD

USER_CONFIG_PATH = Path.home() / ".lazytask_config.yaml"
DEFAULT_DATA_FILE = "tasks.json"

ENV_FILE = "LAZYTASK_FILE"
ENV_UI = "LAZYTASK_UI"
ENV_THEME = "LAZYTASK_THEME"

logger = logging.getLogger("lazytask.config")


@dataclass
class Settings:
    data_file: str = DEFAULT_DATA_FILE
    ui: str = "formatted"
    theme: str = "dark-olive"
    fuzzy_threshold: float = DEFAULT_THRESHOLD
    log_file: Optional[str] = None


def _load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or USER_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a mapping", path)
        return {}
    return data


def _save_config(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or USER_CONFIG_PATH
    if not data:
        if path.exists():
            path.unlink()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")


def _threshold(value: Any) -> float:
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid fuzzy_threshold %r; using %s", value, DEFAULT_THRESHOLD)
        return DEFAULT_THRESHOLD
    return min(1.0, max(0.0, threshold))


def load_settings(path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """Config file values with LAZYTASK_* environment overrides applied on top."""
    env = os.environ if environ is None else environ
    data = _load_config(path)
    settings = Settings(
        data_file=str(data.get("data_file") or DEFAULT_DATA_FILE),
        ui=str(data.get("ui") or "formatted"),
        theme=str(data.get("theme") or "dark-olive"),
        fuzzy_threshold=_threshold(data.get("fuzzy_threshold", DEFAULT_THRESHOLD)),
        log_file=data.get("log_file") or None,
    )
    if env.get(ENV_FILE):
        settings.data_file = env[ENV_FILE]
    if env.get(ENV_UI):
        settings.ui = env[ENV_UI]
    if env.get(ENV_THEME):
        settings.theme = env[ENV_THEME]
    return settings


def set_user_value(key: str, value: Any, path: Optional[Path] = None) -> None:
    data = _load_config(path)
    if value in (None, ""):
        data.pop(key, None)
    else:
        data[key] = value
    _save_config(data, path)
