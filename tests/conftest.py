from datetime import datetime, timezone

import pytest

from flashdeck.application.config import AppConfig
from flashdeck.application.factory import build_services


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate from any real ~/.flashdeck.toml and FLASHDECK_* variables
    monkeypatch.setenv("HOME", str(home))
    for key in ("DATA_DIR", "USERNAME", "PASSWORD", "API_TOKEN", "HOST", "PORT", "ENABLE_FUZZ"):
        monkeypatch.delenv(f"FLASHDECK_{key}", raising=False)
    return home


@pytest.fixture
def t0():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def config(data_dir):
    return AppConfig(
        data_dir=data_dir,
        username="admin",
        password="secret",
        api_token="test-token",
        session_secret="test-secret",
    )


@pytest.fixture
def services(config):
    return build_services(config)
