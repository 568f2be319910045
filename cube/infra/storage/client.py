"""Storage driver protocol and error types.

The driver is the boto3 ``s3`` client. Only the subset of its API used by
the bucket and the facade is declared here, so tests can hand in any object
with the same shape.
"""

from __future__ import annotations

from typing import IO, Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

NOT_FOUND_CODE = "NoSuchKey"

_OBJECT_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})
_BUCKET_NOT_FOUND_CODES = frozenset({"NoSuchBucket"})
_PERMISSION_CODES = frozenset(
    {
        "AccessDenied",
        "403",
        "Forbidden",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
    }
)


class StorageError(RuntimeError):
    """Raised when object storage operations fail.

    ``raw`` keeps the driver exception for callers that need
    driver-specific detail.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        operation: str | None = None,
        key: str | None = None,
        raw: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.operation = operation
        self.key = key
        self.raw = raw


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""


class BucketNotFoundError(StorageError):
    """Raised when the configured bucket does not exist."""


class StoragePermissionError(StorageError):
    """Raised when credentials are rejected or lack permission."""


class StorageDriver(Protocol):
    """Capability interface consumed by :class:`Bucket` and :class:`Cube`.

    Method names and keyword arguments follow the boto3 S3 client. Every
    method raises ``botocore`` exceptions on failure.
    """

    def head_bucket(self, *, Bucket: str) -> dict[str, Any]: ...

    def create_bucket(self, *, Bucket: str, **kwargs: Any) -> dict[str, Any]: ...

    def list_objects(self, *, Bucket: str, **kwargs: Any) -> dict[str, Any]: ...

    def delete_bucket(self, *, Bucket: str) -> dict[str, Any]: ...

    def upload_fileobj(
        self, Fileobj: IO[bytes], Bucket: str, Key: str, **kwargs: Any
    ) -> None:
        """Managed, multipart-capable upload. Returns nothing."""
        ...

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, Any]: ...

    def head_object(self, *, Bucket: str, Key: str) -> dict[str, Any]: ...

    def copy_object(
        self, *, Bucket: str, Key: str, CopySource: str
    ) -> dict[str, Any]: ...

    def delete_object(self, *, Bucket: str, Key: str) -> dict[str, Any]: ...


def translate_error(
    exc: BaseException, *, operation: str, key: str | None = None
) -> StorageError:
    """Map a driver exception onto the storage error hierarchy.

    Absent objects always read as ``NoSuchKey``, whichever call detected it
    (``head_object`` only reports a bare ``404``).
    """
    if isinstance(exc, StorageError):
        return exc

    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = str(error.get("Code") or "Unknown")
        message = error.get("Message") or str(exc)
        details = {"code": code, "operation": operation, "key": key, "raw": exc}
        if code in _OBJECT_NOT_FOUND_CODES:
            return ObjectNotFoundError(NOT_FOUND_CODE, **details)
        if code in _BUCKET_NOT_FOUND_CODES:
            return BucketNotFoundError(code, **details)
        if code in _PERMISSION_CODES:
            return StoragePermissionError(f"{code}: {message}", **details)
        return StorageError(f"{code}: {message}", **details)

    if isinstance(exc, BotoCoreError):
        return StorageError(
            f"TransportError: {exc}",
            code="TransportError",
            operation=operation,
            key=key,
            raw=exc,
        )

    return StorageError(
        f"{operation} failed: {exc}", operation=operation, key=key, raw=exc
    )
