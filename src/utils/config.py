from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import os
import yaml
from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://restcountries.com/v3.1"


@dataclass(frozen=True)
class APIConfig:
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class UIConfig:
    # Quiet period after the last keystroke before a search runs.
    debounce_ms: int = 500


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def _config_path(path: str | None) -> Path:
    load_dotenv()
    return Path(path or os.getenv("COUNTRY_LOOKUP_API_CONFIG") or (_project_root() / "config" / "api.yaml"))


def load_api_config(path: str | None = None) -> APIConfig:
    """
    Load REST Countries API config from YAML.

    Precedence:
    - explicit `path`
    - env `COUNTRY_LOOKUP_API_CONFIG`
    - project default `config/api.yaml`
    """
    cfg_path = _config_path(path)
    cfg = load_yaml(cfg_path)
    api = cfg.get("api") or {}

    base_url = api.get("base_url")
    timeout_seconds = api.get("timeout_seconds")

    if not base_url:
        raise ValueError(f"Missing api.base_url in {cfg_path}")
    if timeout_seconds is None:
        raise ValueError(f"Missing api.timeout_seconds in {cfg_path}")

    return APIConfig(
        base_url=str(base_url),
        timeout_seconds=float(timeout_seconds),
    )


def load_ui_config(path: str | None = None) -> UIConfig:
    """
    Load UI timing config from the same YAML file (`ui:` section).
    The section is optional; absent keys keep their defaults.
    """
    cfg_path = _config_path(path)
    cfg = load_yaml(cfg_path)
    ui = cfg.get("ui") or {}

    debounce_ms = ui.get("debounce_ms")
    if debounce_ms is None:
        return UIConfig()
    if int(debounce_ms) < 0:
        raise ValueError(f"ui.debounce_ms must be >= 0 in {cfg_path}")
    return UIConfig(debounce_ms=int(debounce_ms))


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
