# ctxforge/core/services/write_guard.py
# Heuristic check run before every write of the project collection.
# It catches one failure mode: an empty, never-loaded in-memory list being
# written back over a real collection. It does not model intent.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from ...settings import GUARD_FILENAME, GUARD_MAX_INCOMING, GUARD_MIN_EXISTING
from ..errors import GuardRejectedError

log = logging.getLogger(__name__)


def check_write_guard(storage_dir: Path, filename: str, incoming: str) -> Optional[GuardRejectedError]:
    """
    Return a GuardRejectedError (unraised) when the write should be refused,
    None when it may go ahead.

    Fails open: if either side does not parse, the write is allowed so that a
    corrupt primary never locks out all future writes.
    """
    if filename != GUARD_FILENAME:
        return None

    path = Path(storage_dir) / filename
    if not path.exists():
        return None

    try:
        existing = json.loads(path.read_text(encoding="utf-8"))
        proposed = json.loads(incoming)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        log.error("Write guard check failed for %s, allowing write: %s", filename, exc)
        return None

    if not (isinstance(existing, list) and isinstance(proposed, list)):
        return None

    if len(existing) > GUARD_MIN_EXISTING and len(proposed) <= GUARD_MAX_INCOMING:
        log.error(
            "Write guard: refusing to overwrite %d projects with %d", len(existing), len(proposed)
        )
        return GuardRejectedError(filename, len(existing), len(proposed))
    return None
