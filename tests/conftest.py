import sys
import pytest


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    # keep tests away from the real config/log/legacy directories
    monkeypatch.delenv("CONTEXT_FORGE_DATA_DIR", raising=False)
    monkeypatch.setenv("CONTEXT_FORGE_LEGACY_DIR", str(tmp_path / "no-legacy"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    # the CLI installs its own excepthook
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
