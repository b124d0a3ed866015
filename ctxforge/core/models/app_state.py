from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...settings import APP_VERSION

# Python attribute -> on-disk JSON key
STATE_KEYS: Dict[str, str] = {
    "last_active_project_id": "lastActiveProjectId",
    "window_bounds": "windowBounds",
    "panel_sizes": "panelSizes",
    "app_version": "appVersion",
    "last_opened": "lastOpened",
}
STATE_JSON_KEYS: Dict[str, str] = {v: k for k, v in STATE_KEYS.items()}


@dataclass
class WindowBounds:
    x: float
    y: float
    width: float
    height: float


@dataclass
class AppState:
    last_active_project_id: str = ""
    window_bounds: Optional[WindowBounds] = None
    panel_sizes: Optional[List[float]] = None
    app_version: str = APP_VERSION
    last_opened: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AppState":
        kwargs = {STATE_JSON_KEYS[k]: v for k, v in raw.items() if k in STATE_JSON_KEYS}
        bounds = kwargs.get("window_bounds")
        if isinstance(bounds, dict):
            kwargs["window_bounds"] = WindowBounds(**bounds)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, key in STATE_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, WindowBounds):
                value = value.__dict__.copy()
            out[key] = value
        return out
