"""Config loader — reads YAML, applies PERP_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from perp_analytics.config.schema import AppConfig

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PERP_RPC_URL": ("rpc", "url"),
    "PERP_PROGRAM_ID": ("program", "program_id"),
    "PERP_CSV_PATH": ("report", "csv_path"),
    "PERP_LOG_LEVEL": ("logging", "level"),
    "PERP_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
