from __future__ import annotations

from cube.common.config import DEFAULT_BASE_URL, Settings, get_settings


def test_settings_from_environment(cube_env, monkeypatch):
    monkeypatch.setenv("CUBE_ENDPOINT", "http://minio:9000")
    monkeypatch.setenv("CORS_ORIGINS", "http://a, http://b")
    get_settings.cache_clear()  # type: ignore[attr-defined]

    settings = get_settings()

    assert settings.CUBE_BUCKET == "bucket"
    assert settings.CUBE_PATH_STYLE is True
    assert settings.CUBE_ENDPOINT == "http://minio:9000"
    assert settings.CORS_ORIGINS == ["http://a", "http://b"]
    assert settings.CUBE_CREATE_BUCKET is False


def test_to_options_leaves_out_unset_values():
    settings = Settings(CUBE_BUCKET="b", CUBE_REGION="r")

    options = settings.to_options()

    assert options["connection"] == {"bucket": "b", "region": "r"}
    assert options["location"] == {"base": DEFAULT_BASE_URL, "path": False}


def test_to_options_renders_full_connection():
    settings = Settings(
        CUBE_ACCESS_KEY="a",
        CUBE_SECRET_KEY="s",
        CUBE_BUCKET="b",
        CUBE_REGION="r",
        CUBE_ENDPOINT="http://minio:9000",
        CUBE_BASE_URL="http://minio:9000",
        CUBE_PATH_STYLE=True,
    )

    options = settings.to_options()

    assert options["connection"]["endpoint"] == "http://minio:9000"
    assert options["location"] == {"base": "http://minio:9000", "path": True}


def test_log_levels_from_environment(cube_env, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("CUBE_STORAGE_LOG_LEVEL", "debug")
    get_settings.cache_clear()  # type: ignore[attr-defined]

    settings = get_settings()

    assert settings.LOG_LEVEL == "WARNING"
    assert settings.CUBE_STORAGE_LOG_LEVEL == "DEBUG"


def test_storage_log_level_defaults_to_unset(cube_env):
    get_settings.cache_clear()  # type: ignore[attr-defined]

    settings = get_settings()

    assert settings.LOG_LEVEL == "INFO"
    assert settings.CUBE_STORAGE_LOG_LEVEL is None
