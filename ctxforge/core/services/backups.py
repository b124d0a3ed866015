# ctxforge/core/services/backups.py
# Timestamped snapshots of a storage file, independent of the rolling
# <name>.backup kept by AtomicFileStore.
#
#   <name>.<ISO timestamp with ':' and '.' -> '-'>.backup
#
# The timestamp format sorts lexicographically in chronological order, so
# nothing here ever parses a date.

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ...settings import BACKUP_SUFFIX, MAX_VERSIONED_BACKUPS, VERSIONED_BACKUP_FILES
from ..storage import validate_filename

log = logging.getLogger(__name__)


def snapshot_stamp(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def _is_versioned(entry: str, filename: str) -> bool:
    return (
        entry.startswith(f"{filename}.")
        and entry.endswith(BACKUP_SUFFIX)
        and entry != f"{filename}{BACKUP_SUFFIX}"
    )


def list_versioned_snapshots(storage_dir: Path, filename: str) -> List[Path]:
    """Versioned snapshots of filename, newest first."""
    validate_filename(filename)
    storage_dir = Path(storage_dir)
    if not storage_dir.is_dir():
        return []
    names = sorted((p.name for p in storage_dir.iterdir() if _is_versioned(p.name, filename)), reverse=True)
    return [storage_dir / n for n in names]


def _try_unlink(path: Path) -> Optional[OSError]:
    try:
        path.unlink()
    except OSError as exc:
        return exc
    return None


def prune_old_snapshots(storage_dir: Path, filename: str, keep: int = MAX_VERSIONED_BACKUPS) -> int:
    """
    Delete versioned snapshots beyond the newest `keep`. Returns how many were
    removed. Never raises: rotation must not block whoever triggered it.
    """
    try:
        snapshots = list_versioned_snapshots(storage_dir, filename)
    except OSError as exc:
        log.error("Backup rotation failed for %s: %s", filename, exc)
        return 0

    removed = 0
    for old in snapshots[keep:]:
        err = _try_unlink(old)
        if err is not None:
            log.error("Backup rotation failed for %s: could not delete %s: %s", filename, old.name, err)
            continue
        removed += 1
    if removed:
        log.info("Pruned %d old versioned backup(s) for %s", removed, filename)
    return removed


def create_versioned_snapshot(storage_dir: Path, filename: str, now: datetime | None = None) -> Optional[Path]:
    """Copy <filename> to a timestamped snapshot and prune. None if there is nothing to copy."""
    validate_filename(filename)
    source = Path(storage_dir) / filename
    if not source.exists():
        return None

    target = Path(storage_dir) / f"{filename}.{snapshot_stamp(now)}{BACKUP_SUFFIX}"
    shutil.copy2(source, target)
    log.info("Versioned backup created: %s", target.name)

    prune_old_snapshots(storage_dir, filename)
    return target


def snapshot_all(storage_dir: Path, filenames: Iterable[str] = VERSIONED_BACKUP_FILES) -> Dict[str, Optional[Path]]:
    """
    Start/exit trigger: snapshot each file. Maps every name to its new
    snapshot, or None when the file was missing or the copy failed (logged,
    never raised). Names are all validated before anything is copied.
    """
    filenames = list(filenames)
    for name in filenames:
        validate_filename(name)

    created: Dict[str, Optional[Path]] = {}
    for name in filenames:
        try:
            created[name] = create_versioned_snapshot(storage_dir, name)
        except OSError as exc:
            log.error("Versioned backup failed for %s: %s", name, exc)
            created[name] = None
    return created
