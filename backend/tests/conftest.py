from __future__ import annotations

import pytest

from services.config_manager import CONFIG_DIR_ENV, ConfigManager


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config singleton at a per-test directory"""
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "config"))
    ConfigManager.reset_instance()
    manager = ConfigManager.get_instance()
    manager.save_config({"workspace": {"root": str(tmp_path / "projects")}})
    yield manager
    ConfigManager.reset_instance()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from main import app

    with TestClient(app) as test_client:
        yield test_client
