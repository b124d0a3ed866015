from __future__ import annotations
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from ..settings import BACKUP_SUFFIX, PROJECTS_BASENAME
from .errors import CorruptedError, InvalidRecordError, NotFoundError, RecordNotFoundError
from .models.project import Project, migrate_project
from .models.schema import COLLECTION_SCHEMA, PROJECT_SCHEMA
from .paths import legacy_storage_dir
from .project import new_project, normalize_keys, now_iso
from .storage import AtomicFileStore

log = logging.getLogger(__name__)

_UNSET = object()


def _check_record(project: Project) -> None:
    try:
        jsonschema.validate(project.to_dict(), PROJECT_SCHEMA)
    except jsonschema.ValidationError as exc:
        where = "/".join(str(p) for p in exc.absolute_path) or "<record>"
        raise InvalidRecordError([f"{where}: {exc.message}"]) from exc


class ProjectStore:
    """
    CRUD over projects.json.

    Every mutation reads the whole collection, changes it in memory and
    writes it back through AtomicFileStore. There is no locking across
    calls: two concurrent mutations are last-writer-wins.
    """

    filename = PROJECTS_BASENAME

    def __init__(self, data_dir: Path | None = None, legacy_dir: Any = _UNSET):
        self.storage = AtomicFileStore(data_dir)
        self.legacy_dir: Optional[Path] = legacy_storage_dir() if legacy_dir is _UNSET else legacy_dir
        self._migration_checked = False

    @property
    def data_dir(self) -> Path:
        return self.storage.data_dir

    def _ensure_initialized(self) -> None:
        if self._migration_checked:
            return
        self._migration_checked = True
        if not self.storage.exists(self.filename):
            self._import_legacy()

    def _import_legacy(self) -> bool:
        """Copy projects.json (and its .backup) from the legacy directory. Never overwrites."""
        if self.legacy_dir is None:
            return False
        legacy = Path(self.legacy_dir)
        src = legacy / self.filename
        dst = self.data_dir / self.filename
        if dst.exists() or not src.exists():
            return False

        self.data_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)

        src_backup = legacy / f"{self.filename}{BACKUP_SUFFIX}"
        dst_backup = self.data_dir / f"{self.filename}{BACKUP_SUFFIX}"
        if src_backup.exists() and not dst_backup.exists():
            shutil.copyfile(src_backup, dst_backup)

        log.info("Migrated %s from legacy location: %s", self.filename, legacy)
        return True

    def _load_raw(self) -> List[Dict[str, Any]]:
        try:
            result = self.storage.read(self.filename)
        except NotFoundError:
            return []
        if result.recovered:
            log.warning("%s: %s", self.filename, result.message)

        records = result.data()
        try:
            jsonschema.validate(records, COLLECTION_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise CorruptedError(self.filename, f"unexpected collection shape: {exc.message}") from exc
        return [migrate_project(r) for r in records]

    def _save(self, projects: List[Project]) -> None:
        payload = json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False)
        self.storage.write(self.filename, payload)

    def get_all(self) -> List[Project]:
        self._ensure_initialized()
        return [Project.from_dict(r) for r in self._load_raw()]

    def get_by_id(self, project_id: str) -> Optional[Project]:
        for p in self.get_all():
            if p.id == project_id:
                return p
        return None

    def create(self, data: Mapping[str, Any]) -> Project:
        existing = self.get_all()
        project = new_project(data, taken=(p.id for p in existing))
        _check_record(project)
        existing.append(project)
        self._save(existing)
        log.info("Created project %s (%s)", project.id, project.name)
        return project

    def update(self, project_id: str, updates: Mapping[str, Any]) -> Project:
        changes = normalize_keys(updates)
        projects = self.get_all()
        for i, p in enumerate(projects):
            if p.id == project_id:
                break
        else:
            raise RecordNotFoundError(project_id)

        merged = {**p.to_dict(), **changes, "updatedAt": now_iso()}
        updated = Project.from_dict(merged)
        _check_record(updated)
        projects[i] = updated
        self._save(projects)
        log.info("Updated project %s", project_id)
        return updated

    def delete(self, project_id: str) -> None:
        projects = self.get_all()
        remaining = [p for p in projects if p.id != project_id]
        if len(remaining) == len(projects):
            raise RecordNotFoundError(project_id)
        self._save(remaining)
        log.info("Deleted project %s", project_id)
