from __future__ import annotations

APP_NAME = "context-forge"
APP_VERSION = "0.1.0"

PROJECTS_BASENAME = "projects.json"
APP_STATE_BASENAME = "app-state.json"

# Environment overrides
DATA_DIR_ENV = "CONTEXT_FORGE_DATA_DIR"
LEGACY_DIR_ENV = "CONTEXT_FORGE_LEGACY_DIR"
LOG_LEVEL_ENV = "CONTEXT_FORGE_LOG_LEVEL"

BACKUP_SUFFIX = ".backup"
TMP_SUFFIX = ".tmp"

# Versioned snapshots kept per base filename
MAX_VERSIONED_BACKUPS = 10
# Files snapshotted on application start/exit
VERSIONED_BACKUP_FILES = (PROJECTS_BASENAME,)

# Write guard: refuse to shrink a collection of more than GUARD_MIN_EXISTING
# records down to GUARD_MAX_INCOMING or fewer in one write. Tunable.
GUARD_FILENAME = PROJECTS_BASENAME
GUARD_MIN_EXISTING = 2
GUARD_MAX_INCOMING = 1

ID_PREFIX = "project_"
DEFAULT_INSTRUCTION = "implementation"
