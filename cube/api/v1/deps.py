from __future__ import annotations

import logging

from fastapi import Header, HTTPException

from cube.common.config import get_settings
from cube.plugin import get_cube

logger = logging.getLogger("http")


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if settings.API_KEY_ENABLED:
        api_key_expected = getattr(settings, "API_KEY", None)
        if not x_api_key or (api_key_expected and x_api_key != api_key_expected):
            raise HTTPException(status_code=401, detail="Invalid API key")


def require_admin_key(x_admin_key: str | None = Header(default=None)) -> None:
    settings = get_settings()
    admin_key = getattr(settings, "DESTRUCTIVE_API_KEY", None)
    if not admin_key:
        raise HTTPException(status_code=503, detail="Bucket deletion is disabled")
    if x_admin_key != admin_key:
        preview = "<missing>"
        if x_admin_key:
            preview = f"{x_admin_key[:4]}***"
        logger.warning(
            "admin_key_mismatch admin_key_preview=%s",
            preview,
        )
        raise HTTPException(status_code=403, detail="Forbidden")


__all__ = ["get_cube", "require_admin_key", "require_api_key"]
