from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...settings import DEFAULT_INSTRUCTION

# Python attribute -> on-disk JSON key
FIELD_KEYS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "template": "template",
    "slice": "slice",
    "task_file": "taskFile",
    "instruction": "instruction",
    "development_phase": "developmentPhase",
    "work_type": "workType",
    "project_date": "projectDate",
    "is_monorepo": "isMonorepo",
    "is_monorepo_enabled": "isMonorepoEnabled",
    "project_path": "projectPath",
    "custom_data": "customData",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
JSON_KEYS: Dict[str, str] = {v: k for k, v in FIELD_KEYS.items()}

# Optional attributes: omitted from the JSON when None
OPTIONAL_KEYS = ("developmentPhase", "workType", "projectDate", "isMonorepoEnabled", "projectPath")

# Keys a caller may never set directly
IMMUTABLE_KEYS = ("id", "createdAt", "updatedAt")

CUSTOM_DATA_KEYS = ("recentEvents", "additionalNotes", "monorepoNote", "availableTools")

WORK_TYPES = ("start", "continue")

# Field-default migration table: JSON key -> (expected type, default).
# Records written before a field existed get the default on every read.
FIELD_DEFAULTS: Dict[str, tuple] = {
    "taskFile": (str, ""),
    "instruction": (str, DEFAULT_INSTRUCTION),
    "isMonorepo": (bool, False),
    "customData": (dict, {}),
}


def migrate_project(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of raw with every FIELD_DEFAULTS entry present and well-typed."""
    out = dict(raw)
    for key, (kind, default) in FIELD_DEFAULTS.items():
        if not isinstance(out.get(key), kind):
            out[key] = copy.deepcopy(default)
    return out


def to_json_key(key: str) -> Optional[str]:
    """Accept either the JSON key or the Python attribute name."""
    if key in JSON_KEYS:
        return key
    return FIELD_KEYS.get(key)


@dataclass
class Project:
    id: str
    name: str
    template: str = ""
    slice: str = ""
    task_file: str = ""
    instruction: str = DEFAULT_INSTRUCTION
    development_phase: Optional[str] = None
    work_type: Optional[str] = None       # "start" | "continue"
    project_date: Optional[str] = None
    is_monorepo: bool = False
    is_monorepo_enabled: Optional[bool] = None
    project_path: Optional[str] = None    # absolute path to the project root
    custom_data: Dict[str, str] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    # keys found on disk that this model does not know; written back untouched
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Project":
        kwargs: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for key, value in raw.items():
            attr = JSON_KEYS.get(key)
            if attr is None:
                extras[key] = value
            else:
                kwargs[attr] = value
        return cls(**kwargs, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, key in FIELD_KEYS.items():
            value = getattr(self, attr)
            if value is None and key in OPTIONAL_KEYS:
                continue
            out[key] = copy.deepcopy(value)
        for key, value in self.extras.items():
            out.setdefault(key, value)
        return out
