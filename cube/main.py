import logging

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cube.api.v1.deps import get_cube, require_api_key
from cube.api.v1.routers.bucket import router as bucket_router
from cube.api.v1.routers.files import router as files_router
from cube.common.config import get_settings
from cube.common.logging import setup_logging
from cube.infra.observability.metrics import metrics_app
from cube.infra.observability.middleware import MetricsMiddleware
from cube.infra.storage.client import (
    BucketNotFoundError,
    ObjectNotFoundError,
    StorageDriver,
    StorageError,
    StoragePermissionError,
)
from cube.plugin import Plugin
from cube.services.cube import Cube

ERROR_CODE_BY_STATUS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
}


def _resolve_error_code(status_code: int) -> str:
    if status_code == 422:
        return "validation_error"
    return ERROR_CODE_BY_STATUS.get(status_code, "unknown_error")


def _storage_status(exc: StorageError) -> int:
    if isinstance(exc, (ObjectNotFoundError, BucketNotFoundError)):
        return 404
    if isinstance(exc, StoragePermissionError):
        return 403
    return 502


def _problem(request: Request, status_code: int, title: str, detail, error_code: str):
    return JSONResponse(
        status_code=status_code,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": title,
            "status": status_code,
            "detail": detail,
            "error_code": error_code,
            "instance": str(request.url),
            "request_id": request.headers.get("X-Request-Id"),
        },
    )


def create_app(*, driver: StorageDriver | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.CUBE_STORAGE_LOG_LEVEL)
    app = FastAPI(
        title="Cube Storage Service",
        version="v1.0",
        description="Object storage facade over an S3-compatible service",
    )

    # Fails with OptionsError listing every missing CUBE_* setting
    Plugin.register(app, settings.to_options(), driver=driver)

    if settings.CORS_ENABLED:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(
        files_router,
        prefix="/api/v1",
        tags=["files"],
        dependencies=[Depends(require_api_key)],
    )
    app.include_router(
        bucket_router,
        prefix="/api/v1",
        tags=["bucket"],
        dependencies=[Depends(require_api_key)],
    )

    if settings.ENABLE_METRICS:
        app.add_middleware(MetricsMiddleware)
        app.mount("/metrics", metrics_app)

    @app.on_event("startup")
    async def on_startup() -> None:
        startup_logger = logging.getLogger("cube.startup")
        if not settings.CUBE_CREATE_BUCKET:
            return
        cube: Cube = app.state.cube
        startup_logger.info(
            "ensuring bucket exists [event=bucket_create_begin] (bucket=%s)",
            cube.bucket.name,
        )
        try:
            await cube.bucket.create()
        except StorageError as exc:
            startup_logger.error(
                "could not create bucket, check credentials and endpoint"
                " [event=bucket_create_failed] (bucket=%s, code=%s)",
                cube.bucket.name,
                exc.code,
            )
            raise

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger = logging.getLogger("http")
        logger.log(
            logging.WARNING if exc.status_code < 500 else logging.ERROR,
            "http_exception status=%s detail=%s method=%s path=%s request_id=%s",
            exc.status_code,
            exc.detail,
            request.method,
            request.url.path,
            request.headers.get("X-Request-Id"),
            extra={
                "extra": {
                    "status": exc.status_code,
                    "detail": exc.detail,
                    "method": request.method,
                    "route": request.url.path,
                    "request_id": request.headers.get("X-Request-Id"),
                }
            },
        )
        return _problem(
            request,
            exc.status_code,
            "HTTP Error",
            exc.detail,
            _resolve_error_code(exc.status_code),
        )

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError):
        status_code = _storage_status(exc)
        logging.getLogger("http").log(
            logging.WARNING if status_code < 500 else logging.ERROR,
            "storage_error status=%s code=%s operation=%s key=%s path=%s",
            status_code,
            exc.code,
            exc.operation,
            exc.key,
            request.url.path,
        )
        return _problem(
            request,
            status_code,
            "Storage Error",
            str(exc),
            _resolve_error_code(status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return _problem(
            request,
            422,
            "Validation Error",
            jsonable_encoder(exc.errors()),
            _resolve_error_code(422),
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(cube: Cube = Depends(get_cube)):
        try:
            await cube.bucket.head()
        except StorageError as exc:
            return {
                "status": "not_ready",
                "detail": {"bucket": cube.bucket.name, "code": exc.code},
            }
        return {"status": "ready"}

    return app


if __name__ == "__main__":
    uvicorn.run("cube.main:create_app", factory=True, host="0.0.0.0", port=8000)
