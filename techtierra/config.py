"""Configuration helpers for TechTierra."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .query import DEFAULT_SEARCH_URL

CONFIG_ENV_VAR = "TECHTIERRA_CONFIG"
SEARCH_URL_ENV_VAR = "TECHTIERRA_SEARCH_URL"
TIMEOUT_ENV_VAR = "TECHTIERRA_TIMEOUT"
PER_PAGE_ENV_VAR = "TECHTIERRA_PER_PAGE"
LOG_LEVEL_ENV_VAR = "TECHTIERRA_LOG_LEVEL"

DEFAULT_TIMEOUT = 15.0
DEFAULT_PER_PAGE = 30
MAX_PER_PAGE = 100
DEFAULT_LOG_LEVEL = "WARNING"


class ConfigError(RuntimeError):
    """The config file or an environment override is unusable."""


def default_config_path() -> Path:
    return Path(
        os.environ.get(CONFIG_ENV_VAR, "~/.config/techtierra/config.json")
    ).expanduser()


def read_config(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file at {path} is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must contain a JSON object")
    return data


def write_config(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2)


@dataclass(slots=True)
class Settings:
    search_url: str = DEFAULT_SEARCH_URL
    timeout: float = DEFAULT_TIMEOUT
    per_page: int = DEFAULT_PER_PAGE
    log_level: str = DEFAULT_LOG_LEVEL
    config_path: Optional[Path] = None


def load_settings(
    *,
    config_path: Optional[Path] = None,
    search_url: Optional[str] = None,
    per_page: Optional[int] = None,
) -> Settings:
    """Resolve settings from explicit values, env vars, the config file, then defaults."""
    path = config_path or default_config_path()
    data = read_config(path)

    url = _first(search_url, os.getenv(SEARCH_URL_ENV_VAR), data.get("search_url"))
    timeout = _first(os.getenv(TIMEOUT_ENV_VAR), data.get("timeout"))
    page_size = _first(per_page, os.getenv(PER_PAGE_ENV_VAR), data.get("per_page"))
    log_level = _first(os.getenv(LOG_LEVEL_ENV_VAR), data.get("log_level"))

    return Settings(
        search_url=str(url).strip() if url else DEFAULT_SEARCH_URL,
        timeout=_number(timeout, DEFAULT_TIMEOUT, float, "timeout"),
        per_page=_clamp(_number(page_size, DEFAULT_PER_PAGE, int, "per_page")),
        log_level=str(log_level).strip().upper() if log_level else DEFAULT_LOG_LEVEL,
        config_path=path,
    )


def _first(*values):
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _number(value, default, kind, name):
    if value is None:
        return default
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name} value: {value!r}") from exc


def _clamp(per_page: int) -> int:
    return max(1, min(per_page, MAX_PER_PAGE))
