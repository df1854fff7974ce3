from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(f"Config file not found: {p}")
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a dict at root of YAML: {path}")
    return data


def resolve_path(path: str, base_dir: Optional[str] = None) -> str:
    p = Path(path)
    if p.is_absolute():
        return str(p)
    if base_dir is None:
        base_dir = os.getcwd()
    return str((Path(base_dir) / p).resolve())


def section(d: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = d.get(key, {}) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a dict")
    return dict(value)


def optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)
