from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def _package_root() -> Path:
    # hyprdots_installer/lib/manifests.py -> hyprdots_installer
    return Path(__file__).resolve().parents[1]


def default_manifest_path() -> Path:
    return _package_root() / "manifests" / "default.yaml"


def asset_path(name: str) -> Path:
    return _package_root() / "assets" / name


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data
