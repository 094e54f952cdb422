from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "/data/colorbook",
    "log_level": "INFO",
    "engine": {
        "undo_limit": 10,
        "redo_limit": 5,
    },
    "coloring": {
        "start_picture": "drawing01",
        "palette": [
            [255, 255, 255],
            [255, 0, 0],
            [0, 255, 0],
            [0, 0, 255],
            [255, 255, 0],
            [255, 165, 0],
            [255, 0, 255],
            [0, 255, 255],
        ],
        "near_miss": {
            "radius": 12,
            "taps": 3,
            "cooldown_seconds": 4.0,
            "hint_seconds": 2.0,
        },
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    paths = []
    env_path = os.environ.get("COLORBOOK_CONFIG")
    if env_path:
        paths.append(Path(env_path))
    paths.append(Path("config.yaml"))
    paths.append(Path("/opt/colorbook/config.yaml"))
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if not path.exists():
            continue
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if isinstance(data, dict):
            config = _deep_merge(config, data)
        break
    return config


def coerce_limit(value: object, default: int, *, minimum: int = 1) -> int:
    try:
        limit = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return limit if limit >= minimum else default


def engine_limits(config: Dict[str, Any]) -> tuple[int, int]:
    engine = config.get("engine", {})
    undo_limit = coerce_limit(engine.get("undo_limit"), DEFAULT_CONFIG["engine"]["undo_limit"])
    redo_limit = coerce_limit(engine.get("redo_limit"), DEFAULT_CONFIG["engine"]["redo_limit"])
    return undo_limit, redo_limit
