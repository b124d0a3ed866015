# ctxforge/core/models/schema.py
# JSON schemas for what lives in projects.json and app-state.json.
# COLLECTION_SCHEMA is deliberately loose: it is checked on read, before
# field-default migration fills in whatever older records lack.

from .project import CUSTOM_DATA_KEYS, WORK_TYPES

_STRING = {"type": "string"}

COLLECTION_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "name"],
        "properties": {
            "id": _STRING,
            "name": _STRING,
        },
    },
}

PROJECT_SCHEMA = {
    "type": "object",
    "required": ["id", "name", "template", "slice", "taskFile", "instruction",
                 "isMonorepo", "customData", "createdAt", "updatedAt"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        "template": _STRING,
        "slice": _STRING,
        "taskFile": _STRING,
        "instruction": _STRING,
        "developmentPhase": _STRING,
        "workType": {"enum": list(WORK_TYPES)},
        "projectDate": _STRING,
        "isMonorepo": {"type": "boolean"},
        "isMonorepoEnabled": {"type": "boolean"},
        "projectPath": _STRING,
        "customData": {
            "type": "object",
            "properties": {k: _STRING for k in CUSTOM_DATA_KEYS},
            "additionalProperties": False,
        },
        "createdAt": _STRING,
        "updatedAt": _STRING,
    },
}

_NUMBER = {"type": "number"}

APP_STATE_SCHEMA = {
    "type": "object",
    "properties": {
        "lastActiveProjectId": _STRING,
        "windowBounds": {
            "type": "object",
            "required": ["x", "y", "width", "height"],
            "properties": {"x": _NUMBER, "y": _NUMBER, "width": _NUMBER, "height": _NUMBER},
            "additionalProperties": False,
        },
        "panelSizes": {"type": "array", "items": _NUMBER},
        "appVersion": _STRING,
        "lastOpened": _STRING,
    },
}
