from __future__ import annotations
import copy
import random
import string
from typing import Any, Dict, Iterable, Mapping
from datetime import datetime, timezone

from ..settings import ID_PREFIX
from .models.project import FIELD_DEFAULTS, IMMUTABLE_KEYS, Project, to_json_key
from .errors import InvalidRecordError

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_iso() -> str:
    # millisecond precision, trailing Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_project_id(taken: Iterable[str] = ()) -> str:
    """project_<epoch ms>_<9 base-36 chars>, regenerated until it is not in taken."""
    taken = set(taken)
    while True:
        ms = int(datetime.now(timezone.utc).timestamp() * 1000)
        suffix = "".join(random.choices(_ID_ALPHABET, k=9))
        pid = f"{ID_PREFIX}{ms}_{suffix}"
        if pid not in taken:
            return pid


def normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map caller keys (JSON or attribute names) to JSON keys; reject unknown and immutable ones."""
    out: Dict[str, Any] = {}
    bad = []
    for key, value in data.items():
        json_key = to_json_key(key)
        if json_key is None:
            bad.append(f"unknown field '{key}'")
        elif json_key in IMMUTABLE_KEYS:
            bad.append(f"field '{json_key}' cannot be set")
        else:
            out[json_key] = value
    if bad:
        raise InvalidRecordError(bad)
    return out


def new_project(data: Mapping[str, Any], taken: Iterable[str] = ()) -> Project:
    fields = normalize_keys(data)
    if not isinstance(fields.get("name"), str) or not fields["name"].strip():
        raise InvalidRecordError(["'name' is required"])

    now = now_iso()
    raw = {"template": "", "slice": "", **fields}
    for key, (_, default) in FIELD_DEFAULTS.items():
        if raw.get(key) is None:
            raw[key] = copy.deepcopy(default)
    raw.update(id=new_project_id(taken), createdAt=now, updatedAt=now)
    return Project.from_dict(raw)
