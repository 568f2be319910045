from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

ENV_FILE = Path(".env")

DEFAULT_BASE_URL = "https://{bucket}.s3.amazonaws.com"


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_level(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    return value.strip().upper()


def _as_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    CUBE_ACCESS_KEY: str | None = None
    CUBE_SECRET_KEY: str | None = None
    CUBE_BUCKET: str | None = None
    CUBE_REGION: str | None = None
    CUBE_ENDPOINT: str | None = None
    CUBE_BASE_URL: str = DEFAULT_BASE_URL
    CUBE_PATH_STYLE: bool = False
    CUBE_CREATE_BUCKET: bool = False
    ENABLE_METRICS: bool = True
    API_KEY_ENABLED: bool = False
    API_KEY: str | None = None
    DESTRUCTIVE_API_KEY: str | None = None
    CORS_ENABLED: bool = False
    CORS_ORIGINS: list[str] = field(default_factory=list)
    LOG_LEVEL: str = "INFO"
    CUBE_STORAGE_LOG_LEVEL: str | None = None

    def to_options(self) -> dict[str, Any]:
        """Render the plugin options mapping.

        Unset values are left out so that validation reports them as
        missing instead of as ``None`` type errors.
        """
        connection = {
            "access": self.CUBE_ACCESS_KEY,
            "secret": self.CUBE_SECRET_KEY,
            "bucket": self.CUBE_BUCKET,
            "region": self.CUBE_REGION,
            "endpoint": self.CUBE_ENDPOINT or None,
        }
        return {
            "connection": {k: v for k, v in connection.items() if v is not None},
            "location": {
                "base": self.CUBE_BASE_URL,
                "path": self.CUBE_PATH_STYLE,
            },
        }

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            CUBE_ACCESS_KEY=os.environ.get("CUBE_ACCESS_KEY"),
            CUBE_SECRET_KEY=os.environ.get("CUBE_SECRET_KEY"),
            CUBE_BUCKET=os.environ.get("CUBE_BUCKET"),
            CUBE_REGION=os.environ.get("CUBE_REGION"),
            CUBE_ENDPOINT=os.environ.get("CUBE_ENDPOINT"),
            CUBE_BASE_URL=os.environ.get("CUBE_BASE_URL", cls.CUBE_BASE_URL),
            CUBE_PATH_STYLE=_as_bool(
                os.environ.get("CUBE_PATH_STYLE"), cls.CUBE_PATH_STYLE
            ),
            CUBE_CREATE_BUCKET=_as_bool(
                os.environ.get("CUBE_CREATE_BUCKET"), cls.CUBE_CREATE_BUCKET
            ),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            API_KEY_ENABLED=_as_bool(
                os.environ.get("API_KEY_ENABLED"), cls.API_KEY_ENABLED
            ),
            API_KEY=os.environ.get("API_KEY"),
            DESTRUCTIVE_API_KEY=os.environ.get("DESTRUCTIVE_API_KEY"),
            CORS_ENABLED=_as_bool(os.environ.get("CORS_ENABLED"), cls.CORS_ENABLED),
            CORS_ORIGINS=_as_list(os.environ.get("CORS_ORIGINS")),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            CUBE_STORAGE_LOG_LEVEL=_as_level(os.environ.get("CUBE_STORAGE_LOG_LEVEL")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
