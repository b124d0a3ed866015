from __future__ import annotations
import json
import logging
import os
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..settings import BACKUP_SUFFIX, TMP_SUFFIX
from .errors import CorruptedError, InvalidContentError, InvalidNameError, NotFoundError
from .paths import storage_dir as default_storage_dir
from .services.write_guard import check_write_guard

log = logging.getLogger(__name__)

RECOVERED_MESSAGE = "Data recovered from backup file"


@dataclass
class ReadResult:
    content: str
    recovered: bool = False
    message: Optional[str] = None

    def data(self) -> Any:
        return json.loads(self.content)


def validate_filename(filename: str) -> None:
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise InvalidNameError(filename)


def _load_json_text(path: Path) -> str:
    """Read path and make sure it parses. Raises OSError or ValueError."""
    text = path.read_text(encoding="utf-8")
    json.loads(text)
    return text


def _try_copy(src: Path, dst: Path) -> Optional[OSError]:
    try:
        shutil.copyfile(src, dst)
    except OSError as exc:
        return exc
    return None


# One lock per primary file, shared by every store instance in the process,
# since they all go through the same <name>.tmp.
_FILE_LOCKS: Dict[Path, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _FILE_LOCKS_GUARD:
        lock = _FILE_LOCKS.get(key)
        if lock is None:
            lock = _FILE_LOCKS[key] = threading.Lock()
        return lock


class AtomicFileStore:
    """
    Named JSON documents inside one directory.

    Writes go through <name>.tmp and an atomic rename, after copying the
    previous primary to <name>.backup. Reads fall back to <name>.backup when
    the primary is missing or unparsable.

    Writes to the same file are serialised across all instances in the
    process; nothing is locked across calls or across processes.
    """

    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir) if data_dir is not None else default_storage_dir()

    def path_for(self, filename: str) -> Path:
        validate_filename(filename)
        return self.data_dir / filename

    def _backup_path(self, filename: str) -> Path:
        return self.data_dir / f"{filename}{BACKUP_SUFFIX}"

    def read(self, filename: str) -> ReadResult:
        path = self.path_for(filename)
        backup = self._backup_path(filename)

        try:
            return ReadResult(content=_load_json_text(path))
        except FileNotFoundError:
            primary_missing = True
        except (OSError, ValueError) as exc:
            primary_missing = False
            log.warning("Primary %s unreadable (%s), trying backup", filename, exc)

        try:
            content = _load_json_text(backup)
        except (OSError, ValueError) as exc:
            if primary_missing:
                raise NotFoundError(filename) from exc
            raise CorruptedError(filename) from exc

        err = self._restore(filename, backup, path)
        if err is not None:
            log.error("Could not restore %s from backup: %s", filename, err)
        log.warning("Recovered %s from %s", filename, backup.name)
        return ReadResult(content=content, recovered=True, message=RECOVERED_MESSAGE)

    def _restore(self, filename: str, backup: Path, path: Path) -> Optional[OSError]:
        """Put the backup back in place of the primary, through the temp file."""
        tmp = self.data_dir / f"{filename}{TMP_SUFFIX}"
        with _lock_for(path):
            try:
                _load_json_text(path)
                return None  # a writer got there first
            except (OSError, ValueError):
                pass
            err = _try_copy(backup, tmp)
            if err is None:
                try:
                    os.replace(tmp, path)
                except OSError as exc:
                    err = exc
            if err is not None:
                tmp.unlink(missing_ok=True)
        return err

    def write(self, filename: str, content: str) -> None:
        path = self.path_for(filename)
        tmp = self.data_dir / f"{filename}{TMP_SUFFIX}"

        with _lock_for(path):
            rejection = check_write_guard(self.data_dir, filename, content)
            if rejection is not None:
                raise rejection

            self.data_dir.mkdir(parents=True, exist_ok=True)

            if path.exists():
                err = _try_copy(path, self._backup_path(filename))
                if err is not None:
                    log.error("Backup before write failed for %s: %s", filename, err)

            try:
                tmp.write_text(content, encoding="utf-8")
                json.loads(content)
                os.replace(tmp, path)
            except ValueError as exc:
                tmp.unlink(missing_ok=True)
                raise InvalidContentError(filename, str(exc)) from exc
            except OSError:
                tmp.unlink(missing_ok=True)
                raise

    def create_backup(self, filename: str) -> None:
        path = self.path_for(filename)
        if path.exists():
            shutil.copyfile(path, self._backup_path(filename))

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()
