"""Object storage facade.

Per-object operations scoped to one bucket, plus public path resolution.
Every result keeps the driver's raw response in ``raw``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any, Mapping, Union

from starlette.datastructures import UploadFile

from cube.common.options import (
    ConnectionOptions,
    CubeOptions,
    LocationOptions,
    validate_options,
)
from cube.infra.storage.client import ObjectNotFoundError, StorageDriver, StorageError
from cube.infra.storage.s3_client import build_driver
from cube.services.base import BaseService
from cube.services.bucket import Bucket

logger = logging.getLogger("cube.storage")

Content = Union[str, bytes, bytearray, memoryview, IO[bytes], UploadFile]


@dataclass(frozen=True, slots=True)
class PutResult:
    raw: Any


@dataclass(frozen=True, slots=True)
class GetResult:
    stream: Any
    raw: Any


@dataclass(frozen=True, slots=True)
class MetaResult:
    size: int | None
    modified: datetime | None
    raw: Any


@dataclass(frozen=True, slots=True)
class ExistsResult:
    exists: bool
    raw: Any
    size: int | None = None
    modified: datetime | None = None


@dataclass(frozen=True, slots=True)
class CopyResult:
    raw: Any


@dataclass(frozen=True, slots=True)
class DeleteResult:
    raw: Any


@dataclass(frozen=True, slots=True)
class MoveResult:
    copy: CopyResult
    delete: DeleteResult


def _as_fileobj(content: Content) -> IO[bytes]:
    """Normalize upload content into a readable binary file object."""
    if isinstance(content, str):
        return io.BytesIO(content.encode("utf-8"))
    if isinstance(content, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(content))
    if isinstance(content, UploadFile):
        return content.file
    if hasattr(content, "read"):
        return content
    raise TypeError(
        f"Unsupported content type {type(content).__name__}; "
        "expected str, bytes or a binary file object"
    )


class Cube(BaseService):
    """Facade over one bucket of an S3-compatible service.

    The driver is built from the options unless one is injected; the bucket
    shares it.
    """

    def __init__(
        self,
        options: CubeOptions | Mapping[str, Any],
        *,
        driver: StorageDriver | None = None,
    ) -> None:
        self.options = validate_options(options)
        super().__init__(driver if driver is not None else build_driver(self.options))
        connection = self.options.connection
        self.bucket = Bucket(
            connection.bucket,
            self.driver,
            region=connection.region,
            endpoint=connection.endpoint,
        )
        self._root = self._resolve_root()

    @property
    def connection(self) -> ConnectionOptions:
        return self.options.connection

    @property
    def location(self) -> LocationOptions:
        return self.options.location

    @property
    def root(self) -> str:
        return self._root

    def _resolve_root(self) -> str:
        base = self.location.base
        bucket = self.connection.bucket
        if self.location.path:
            return "/".join([base, bucket])
        # first occurrence only
        return base.replace("{bucket}", bucket, 1).replace(
            "{region}", self.connection.region, 1
        )

    async def put(self, location: str, content: Content) -> PutResult:
        """Upload ``content`` to ``location`` through the managed transfer.

        The managed transfer returns nothing, so the stored object's headers
        are fetched afterwards and returned as the raw response. Only upload
        failures are raised; if the follow-up head fails the write has still
        happened and ``raw`` is ``None``.
        """
        await self._call(
            "upload_fileobj",
            key=location,
            Fileobj=_as_fileobj(content),
            Bucket=self.bucket.name,
            Key=location,
        )
        try:
            res = await self._call(
                "head_object", key=location, Bucket=self.bucket.name, Key=location
            )
        except StorageError as exc:
            logger.warning("put_head_failed key=%s code=%s", location, exc.code)
            return PutResult(raw=None)
        return PutResult(raw=res)

    async def get(self, location: str) -> GetResult:
        res = await self._call(
            "get_object", key=location, Bucket=self.bucket.name, Key=location
        )
        return GetResult(stream=res["Body"], raw=res)

    async def meta(self, location: str) -> MetaResult:
        res = await self._call(
            "head_object", key=location, Bucket=self.bucket.name, Key=location
        )
        return MetaResult(
            size=res.get("ContentLength"),
            modified=res.get("LastModified"),
            raw=res,
        )

    async def exists(self, location: str) -> ExistsResult:
        """Report whether ``location`` can be read.

        Any metadata failure reads as absent, not only a missing object.
        """
        try:
            meta = await self.meta(location)
        except StorageError as exc:
            if not isinstance(exc, ObjectNotFoundError):
                logger.warning(
                    "exists_check_failed key=%s code=%s", location, exc.code
                )
            return ExistsResult(exists=False, raw=exc)
        return ExistsResult(
            exists=True, size=meta.size, modified=meta.modified, raw=meta.raw
        )

    async def copy(self, source: str, target: str) -> CopyResult:
        res = await self._call(
            "copy_object",
            key=target,
            Bucket=self.bucket.name,
            Key=target,
            CopySource=f"/{self.bucket.name}/{source}",
        )
        return CopyResult(raw=res)

    async def move(self, source: str, target: str) -> MoveResult:
        """Copy then delete. Not atomic.

        If the delete fails the object stays at both keys and the error
        propagates; nothing is rolled back.
        """
        copied = await self.copy(source, target)
        try:
            deleted = await self.delete(source)
        except StorageError as exc:
            logger.warning(
                "move_left_duplicate source=%s target=%s code=%s",
                source,
                target,
                exc.code,
            )
            raise
        return MoveResult(copy=copied, delete=deleted)

    async def delete(self, location: str) -> DeleteResult:
        res = await self._call(
            "delete_object", key=location, Bucket=self.bucket.name, Key=location
        )
        return DeleteResult(raw=res)

    def path(self, location: str) -> str:
        """Public path of ``location``. The key is not URL-encoded."""
        return "/".join([self._root, location])
