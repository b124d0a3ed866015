from pathlib import Path
import json
import sys
from ctxforge.cli.run import main
from ctxforge.core.project_store import ProjectStore
from ctxforge.settings import APP_VERSION


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out == f"ctxforge {APP_VERSION}\n"


def test_no_command_prints_help(capsys):
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out


def test_path(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "path"]) == 0
    out = capsys.readouterr().out
    assert str(tmp_path) in out


def test_list_empty(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "list"]) == 0
    assert "No projects yet." in capsys.readouterr().out


def test_list_and_show(tmp_path: Path, capsys):
    p = ProjectStore(tmp_path, legacy_dir=None).create({"name": "alpha", "template": "web", "slice": "auth"})
    assert main(["--data-dir", str(tmp_path), "list"]) == 0
    out = capsys.readouterr().out
    assert "alpha" in out and p.id in out

    assert main(["--data-dir", str(tmp_path), "show", p.id]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["name"] == "alpha"
    assert shown["instruction"] == "implementation"


def test_show_unknown(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "show", "project_0_nope"]) == 1
    assert "not found" in capsys.readouterr().err


def test_snapshot_and_backups(tmp_path: Path, capsys):
    ProjectStore(tmp_path, legacy_dir=None).create({"name": "alpha"})
    assert main(["--data-dir", str(tmp_path), "snapshot"]) == 0
    assert "Wrote" in capsys.readouterr().out
    assert len(list(tmp_path.glob("projects.json.*.backup"))) == 1

    assert main(["--data-dir", str(tmp_path), "backups"]) == 0
    assert "projects.json." in capsys.readouterr().out


def test_snapshot_missing_file(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "snapshot", "--file", "app-state.json"]) == 0
    assert "Nothing to snapshot" in capsys.readouterr().out


def test_bad_filename_reports_error(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "snapshot", "--file", "../x.json"]) == 1
    assert "Invalid filename" in capsys.readouterr().err


def test_corrupted_collection_reports_error(tmp_path: Path, capsys):
    (tmp_path / "projects.json").write_text("{}", encoding="utf-8")
    assert main(["--data-dir", str(tmp_path), "list"]) == 1
    assert "error:" in capsys.readouterr().err


def test_commands_log_uncaught_exceptions(tmp_path: Path):
    before = sys.excepthook
    assert main(["--data-dir", str(tmp_path), "path"]) == 0
    assert sys.excepthook is not before


def test_snapshot_reports_each_file(tmp_path: Path, capsys):
    ProjectStore(tmp_path, legacy_dir=None).create({"name": "alpha"})
    args = ["--data-dir", str(tmp_path), "snapshot", "--file", "projects.json", "--file", "app-state.json"]
    assert main(args) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("Wrote ") and "projects.json." in out[0]
    assert out[1] == "Nothing to snapshot: app-state.json does not exist or could not be copied"


def test_bad_filename_snapshots_nothing(tmp_path: Path, capsys):
    ProjectStore(tmp_path, legacy_dir=None).create({"name": "alpha"})
    assert main(["--data-dir", str(tmp_path), "snapshot", "--file", "projects.json", "--file", "a/b.json"]) == 1
    assert "Invalid filename" in capsys.readouterr().err
    assert list(tmp_path.glob("projects.json.*.backup")) == []


def test_backups_rejects_bad_filename(tmp_path: Path, capsys):
    assert main(["--data-dir", str(tmp_path), "backups", "--file", "../x.json"]) == 1
    assert "Invalid filename" in capsys.readouterr().err
