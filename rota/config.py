"""Configuration loading for the rota engine (JSON or YAML)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass
class PlannerConfig:
    time_limit_seconds: float = 10.0
    num_workers: int = 4
    coverage_weight: int = 1000
    hours_weight: int = 1


@dataclass
class RotaConfig:
    db_url: Optional[str] = None  # None runs the store in local-only mode
    state_path: str = str(Path.home() / ".rota" / "state.json")
    admin_password: str = "admin"
    clear_secret: Optional[str] = None
    max_range_days: int = 62
    export_dir: str = "."
    planner: PlannerConfig = field(default_factory=PlannerConfig)

    @property
    def persistence_configured(self) -> bool:
        return bool(self.db_url and self.db_url.strip())


_ENV_OVERRIDES = {
    "ROTA_DB_URL": "db_url",
    "ROTA_STATE_PATH": "state_path",
    "ROTA_ADMIN_PASSWORD": "admin_password",
    "ROTA_CLEAR_SECRET": "clear_secret",
}


def _read_file(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return data


def load_config(path: str | Path | None = None, env: Optional[Dict[str, str]] = None) -> RotaConfig:
    """Load configuration from a file, then apply environment overrides.

    Args:
        path: JSON or YAML file; optional
        env: Environment mapping (defaults to os.environ)

    Returns:
        RotaConfig

    Raises:
        FileNotFoundError: If path is given but missing
        ValueError: If a value has the wrong type
    """
    data: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")
        data = _read_file(p)

    env = os.environ if env is None else env
    for var, key in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value is not None and value.strip():
            data[key] = value.strip()

    planner_data = data.pop("planner", None) or {}
    if not isinstance(planner_data, dict):
        raise ValueError("'planner' must be a mapping")
    known = set(RotaConfig.__dataclass_fields__) - {"planner"}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    unknown = set(planner_data) - set(PlannerConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown planner config keys: {sorted(unknown)}")

    cfg = RotaConfig(**data, planner=PlannerConfig(**planner_data))
    if int(cfg.max_range_days) < 1:
        raise ValueError("max_range_days must be positive")
    cfg.max_range_days = int(cfg.max_range_days)
    return cfg
