# landing/utils/jsonio.py
from __future__ import annotations
import json
import copy
from typing import Any, Dict

import numpy as np


def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _to_builtin(obj: Any) -> Any:
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def save_json(path: str, data: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_to_builtin)


def deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge 'override' into 'base' (returns a new dict).
    """
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def override_config(cfg: dict, overrides: dict) -> dict:
    """
    Dot-path override utility, e.g. {"table.depth": 5, "rules.max_doubles": 2}.
    """
    out = copy.deepcopy(cfg)

    def set_by_path(d: dict, path: str, value: Any) -> None:
        keys = path.split(".")
        for k in keys[:-1]:
            if k not in d or not isinstance(d[k], dict):
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value

    for k, v in (overrides or {}).items():
        set_by_path(out, k, v)
    return out


def parse_assignments(pairs) -> Dict[str, Any]:
    """Turn ["table.depth=5", "logging.csv=false"] into a dot-path dict; values are parsed as JSON when possible."""
    out: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            out[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            out[key.strip()] = raw
    return out
