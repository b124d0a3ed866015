from pathlib import Path
import json
import pytest
from ctxforge.core.app_state import AppStateStore
from ctxforge.core.errors import InvalidRecordError
from ctxforge.settings import APP_VERSION


def test_defaults_on_fresh_directory(tmp_path: Path):
    s = AppStateStore(tmp_path, app_version="2.0.0")
    state = s.get()
    assert state.last_active_project_id == ""
    assert state.app_version == "2.0.0"
    assert state.last_opened.endswith("Z")
    assert s.last_active_project() is None
    assert not (tmp_path / "app-state.json").exists()


def test_default_version_is_the_package_version(tmp_path: Path):
    assert AppStateStore(tmp_path).get().app_version == APP_VERSION
    assert AppStateStore(tmp_path).update({"panelSizes": [50, 50]}).app_version == APP_VERSION


def test_update_and_read_back(tmp_path: Path):
    s = AppStateStore(tmp_path)
    s.update({"panelSizes": [25, 75], "window_bounds": {"x": 1, "y": 2, "width": 3, "height": 4}})
    s.set_last_active_project("project_1_a")

    on_disk = json.loads((tmp_path / "app-state.json").read_text(encoding="utf-8"))
    assert on_disk["lastActiveProjectId"] == "project_1_a"
    assert on_disk["panelSizes"] == [25, 75]
    assert s.last_active_project() == "project_1_a"
    assert s.get().window_bounds.width == 3


def test_corrupted_state_falls_back_to_defaults(tmp_path: Path):
    (tmp_path / "app-state.json").write_text("{{{", encoding="utf-8")
    assert AppStateStore(tmp_path).get().last_active_project_id == ""


def test_wrong_shape_falls_back_to_defaults(tmp_path: Path):
    (tmp_path / "app-state.json").write_text("[1, 2]", encoding="utf-8")
    assert AppStateStore(tmp_path).last_active_project() is None


def test_unknown_field_rejected(tmp_path: Path):
    with pytest.raises(InvalidRecordError):
        AppStateStore(tmp_path).update({"theme": "dark"})
    with pytest.raises(InvalidRecordError):
        AppStateStore(tmp_path).update({"panelSizes": "wide"})
