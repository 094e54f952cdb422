from __future__ import annotations

from pathlib import Path
from typing import Any, Dict


def get_data_root(config: Dict[str, Any]) -> Path:
    root = config.get("data_root", "/data/colorbook")
    return Path(root).expanduser().resolve()


def ensure_directories(data_root: Path) -> Dict[str, Path]:
    dirs = {
        "pictures": data_root / "pictures",
        "snapshots": data_root / "snapshots",
    }
    for path in dirs.values():
        path.mkdir(parents=True, exist_ok=True)
    return dirs
