from __future__ import annotations

import pytest

from cube.common.config import get_settings
from cube.services.cube import Cube

from tests.services.mock_storage import MockStorageDriver

BUCKET = "bucket"
REGION = "region"

CUBE_ENV = {
    "CUBE_ACCESS_KEY": "access",
    "CUBE_SECRET_KEY": "secret",
    "CUBE_BUCKET": BUCKET,
    "CUBE_REGION": REGION,
    "CUBE_PATH_STYLE": "true",
    "CUBE_BASE_URL": "base",
    "API_KEY_ENABLED": "false",
    "ENABLE_METRICS": "true",
}


@pytest.fixture
def options() -> dict:
    return {
        "connection": {
            "access": "access",
            "secret": "secret",
            "bucket": BUCKET,
            "region": REGION,
        },
        "location": {"path": True, "base": "base"},
    }


@pytest.fixture
def driver() -> MockStorageDriver:
    return MockStorageDriver()


@pytest.fixture
def cube(options, driver) -> Cube:
    driver.buckets[BUCKET] = {}
    return Cube(options, driver=driver)


@pytest.fixture
def cube_env(monkeypatch):
    for key, value in CUBE_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("CUBE_ENDPOINT", raising=False)
    monkeypatch.delenv("CUBE_CREATE_BUCKET", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("DESTRUCTIVE_API_KEY", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("CUBE_STORAGE_LOG_LEVEL", raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]
