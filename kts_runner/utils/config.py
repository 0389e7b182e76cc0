from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, Optional

from ..backends.highlighter import CONTAINMENT_MODES, SCAN, Category, DEFAULT_COLORS


CONFIG_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), "settings.json")

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def load_config() -> Dict[str, Any]:
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
    except Exception:
        return {}


def save_config(cfg: Dict[str, Any]) -> None:
    try:
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(cfg, f, indent=2)
    except Exception:
        pass


def normalize_color(value: Any) -> Optional[str]:
    """'#abc' / '#aabbcc' -> '#AABBCC'; anything else -> None."""
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not _HEX_COLOR_RE.match(s):
        return None
    if len(s) == 4:
        s = "#" + "".join(c * 2 for c in s[1:])
    return s.upper()


def category_colors(cfg: Optional[Dict[str, Any]] = None) -> Dict[Category, str]:
    """Default color table with valid ``highlight_colors`` overrides applied."""
    if cfg is None:
        cfg = load_config()
    colors = dict(DEFAULT_COLORS)
    overrides = cfg.get("highlight_colors")
    if not isinstance(overrides, dict):
        return colors
    for name, value in overrides.items():
        try:
            cat = Category(str(name).strip().lower())
        except ValueError:
            continue
        col = normalize_color(value)
        if col:
            colors[cat] = col
    return colors


def highlight_containment(cfg: Optional[Dict[str, Any]] = None) -> str:
    if cfg is None:
        cfg = load_config()
    mode = str(cfg.get("highlight_containment") or SCAN).strip().lower()
    return mode if mode in CONTAINMENT_MODES else SCAN


def highlight_debug(cfg: Optional[Dict[str, Any]] = None) -> bool:
    if cfg is None:
        cfg = load_config()
    return bool(cfg.get("highlight_debug", False))
