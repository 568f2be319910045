from __future__ import annotations

import logging
from typing import Any

from cube.infra.storage.client import StorageDriver, StorageError
from cube.services.base import BaseService

logger = logging.getLogger("cube.storage")

# us-east-1 is the only region S3 rejects as an explicit LocationConstraint
DEFAULT_REGION = "us-east-1"


class Bucket(BaseService):
    """Lifecycle of a single named bucket."""

    def __init__(
        self,
        name: str,
        driver: StorageDriver,
        *,
        region: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        if not name:
            raise ValueError("bucket name must not be empty")
        super().__init__(driver)
        self._name = name
        self._region = region
        self._endpoint = endpoint

    @property
    def name(self) -> str:
        return self._name

    def _create_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": self._name}
        if self._endpoint is None and self._region and self._region != DEFAULT_REGION:
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self._region
            }
        return params

    async def head(self) -> dict[str, Any]:
        return await self._call("head_bucket", Bucket=self._name)

    async def create(self) -> None:
        """Create the bucket unless it can already be reached.

        Any failure of the existence check triggers a create attempt; the
        create call's own failure propagates.
        """
        try:
            await self.head()
        except StorageError as exc:
            logger.info(
                "bucket_create bucket=%s head_code=%s", self._name, exc.code
            )
            await self._call("create_bucket", **self._create_params())

    async def empty(self) -> int:
        """Delete every object returned by a single listing, one at a time.

        Returns the number of deleted objects. The first failed delete aborts
        the remaining ones.
        """
        res = await self._call("list_objects", Bucket=self._name)
        contents = res.get("Contents") or []
        for item in contents:
            await self._call(
                "delete_object", key=item["Key"], Bucket=self._name, Key=item["Key"]
            )
        logger.info("bucket_emptied bucket=%s deleted=%s", self._name, len(contents))
        return len(contents)

    async def delete(self) -> None:
        await self.empty()
        await self._call("delete_bucket", Bucket=self._name)
        logger.info("bucket_deleted bucket=%s", self._name)
