from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import jsonschema

from ..settings import APP_STATE_BASENAME, APP_VERSION
from .errors import CorruptedError, InvalidRecordError, NotFoundError
from .models.app_state import STATE_JSON_KEYS, STATE_KEYS, AppState
from .models.schema import APP_STATE_SCHEMA
from .project import now_iso
from .storage import AtomicFileStore

log = logging.getLogger(__name__)


class AppStateStore:
    """Window/session state kept in app-state.json. Falls back to defaults rather than failing."""

    filename = APP_STATE_BASENAME

    def __init__(self, data_dir: Path | None = None, app_version: str = APP_VERSION,
                 storage: Optional[AtomicFileStore] = None):
        self.storage = storage or AtomicFileStore(data_dir)
        self.app_version = app_version

    def _defaults(self) -> AppState:
        return AppState(app_version=self.app_version, last_opened=now_iso())

    def get(self) -> AppState:
        try:
            raw = self.storage.read(self.filename).data()
        except NotFoundError:
            log.debug("No app state found, using defaults")
            return self._defaults()
        except CorruptedError as exc:
            log.warning("App state unusable, using defaults: %s", exc)
            return self._defaults()

        try:
            jsonschema.validate(raw, APP_STATE_SCHEMA)
        except jsonschema.ValidationError as exc:
            log.warning("App state has unexpected shape, using defaults: %s", exc.message)
            return self._defaults()

        state = AppState.from_dict({**self._defaults().to_dict(), **raw})
        state.last_opened = now_iso()
        return state

    def update(self, updates: Mapping[str, Any]) -> AppState:
        changes = {}
        for key, value in updates.items():
            json_key = key if key in STATE_JSON_KEYS else STATE_KEYS.get(key)
            if json_key is None:
                raise InvalidRecordError([f"unknown app state field '{key}'"])
            changes[json_key] = value

        merged = {**self.get().to_dict(), **changes, "lastOpened": now_iso()}
        merged = {k: v for k, v in merged.items() if v is not None}
        try:
            jsonschema.validate(merged, APP_STATE_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise InvalidRecordError([exc.message]) from exc

        self.storage.write(self.filename, json.dumps(merged, indent=2))
        return AppState.from_dict(merged)

    def last_active_project(self) -> Optional[str]:
        return self.get().last_active_project_id or None

    def set_last_active_project(self, project_id: str) -> None:
        self.update({"lastActiveProjectId": project_id})
