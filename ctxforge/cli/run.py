from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pandas as pd

from ..core.errors import StorageError
from ..core.paths import legacy_storage_dir
from ..core.project_store import ProjectStore
from ..core.services.backups import list_versioned_snapshots, snapshot_all
from ..logging_setup import install_global_exception_hooks, setup_logging
from ..settings import APP_VERSION, PROJECTS_BASENAME, VERSIONED_BACKUP_FILES

try:
    from importlib.metadata import version as _pkg_version
    CTXFORGE_VERSION = _pkg_version("context-forge-store")
except Exception:
    CTXFORGE_VERSION = APP_VERSION

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ctxforge",
        description="context-forge storage - inspect projects and manage backups.",
    )
    p.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )
    p.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        metavar="PATH",
        help="Storage directory (default: $CONTEXT_FORGE_DATA_DIR or the per-user config dir).",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log info messages to stderr.",
    )

    sub = p.add_subparsers(dest="command", metavar="<command>")

    sub.add_parser("path", help="Print the storage and legacy directories.")
    sub.add_parser("list", help="List projects.")

    s = sub.add_parser("show", help="Print one project as JSON.")
    s.add_argument("id", help="Project id (e.g., project_1718000000000_ab12cd34e)")

    snap = sub.add_parser(
        "snapshot",
        help="Take a versioned backup.",
        description="Copy each file to <file>.<timestamp>.backup and keep the newest 10.",
    )
    snap.add_argument(
        "--file",
        action="append",
        default=None,
        metavar="NAME",
        help=f"File to snapshot; repeatable (default: {', '.join(VERSIONED_BACKUP_FILES)}).",
    )

    b = sub.add_parser("backups", help="List versioned backups, newest first.")
    b.add_argument("--file", default=PROJECTS_BASENAME, metavar="NAME")

    return p


def _cmd_path(store: ProjectStore) -> int:
    legacy = legacy_storage_dir()
    print(f"storage: {store.data_dir}")
    print(f"legacy:  {legacy if legacy else '-'}")
    return 0


def _cmd_list(store: ProjectStore) -> int:
    projects = store.get_all()
    if not projects:
        print("No projects yet.")
        return 0
    df = pd.DataFrame([{
        "Name": p.name, "Template": p.template, "Slice": p.slice, "Updated": p.updated_at, "ID": p.id
    } for p in projects])
    print(df.to_string(index=False))
    return 0


def _cmd_show(store: ProjectStore, project_id: str) -> int:
    project = store.get_by_id(project_id)
    if project is None:
        print(f"Project not found: {project_id}", file=sys.stderr)
        return 1
    print(json.dumps(project.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _cmd_snapshot(store: ProjectStore, files: List[str]) -> int:
    created = snapshot_all(store.data_dir, files)
    for name, path in created.items():
        if path is None:
            print(f"Nothing to snapshot: {name} does not exist or could not be copied")
        else:
            print(f"Wrote {path}")
    return 0


def _cmd_backups(store: ProjectStore, name: str) -> int:
    snapshots = list_versioned_snapshots(store.data_dir, name)
    if not snapshots:
        print(f"No versioned backups for {name}.")
        return 0
    rows = []
    for path in snapshots:
        st = path.stat()
        rows.append({
            "File": path.name,
            "Bytes": st.st_size,
            "Modified": datetime.fromtimestamp(st.st_mtime, timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        })
    print(pd.DataFrame(rows).to_string(index=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"ctxforge {CTXFORGE_VERSION}")
        return 0

    if args.command is None:
        parser.print_help()
        return 2

    setup_logging(console_level=logging.INFO if args.verbose else None)
    install_global_exception_hooks()
    store = ProjectStore(args.data_dir)

    try:
        if args.command == "path":
            return _cmd_path(store)
        if args.command == "list":
            return _cmd_list(store)
        if args.command == "show":
            return _cmd_show(store, args.id)
        if args.command == "snapshot":
            return _cmd_snapshot(store, args.file or list(VERSIONED_BACKUP_FILES))
        if args.command == "backups":
            return _cmd_backups(store, args.file)
    except StorageError as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
