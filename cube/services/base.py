from __future__ import annotations

import logging
import time
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from cube.infra.observability.metrics import observe_storage
from cube.infra.storage.client import StorageDriver, translate_error

logger = logging.getLogger("cube.storage")


class BaseService:
    """Shared plumbing for services that talk to the storage driver.

    The driver is injected and shared; services never build their own copy.
    Driver calls are blocking, so they run in the thread pool.
    """

    def __init__(self, driver: StorageDriver):
        self._driver = driver

    @property
    def driver(self) -> StorageDriver:
        return self._driver

    async def _call(self, method: str, *, key: str | None = None, **params: Any) -> Any:
        func = getattr(self._driver, method)
        started = time.perf_counter()
        try:
            result = await run_in_threadpool(func, **params)
        except (ClientError, BotoCoreError) as exc:
            observe_storage(method, "error", time.perf_counter() - started)
            error = translate_error(exc, operation=method, key=key)
            logger.debug(
                "storage_call_failed method=%s key=%s code=%s",
                method,
                key,
                error.code,
            )
            raise error from exc
        observe_storage(method, "ok", time.perf_counter() - started)
        logger.debug("storage_call method=%s key=%s", method, key)
        return result
