"""Object storage driver layer.

The driver is the boto3 S3 client; this package declares the subset of its
interface the facade relies on and maps its errors onto our own.
"""

from .client import (
    NOT_FOUND_CODE,
    BucketNotFoundError,
    ObjectNotFoundError,
    StorageDriver,
    StorageError,
    StoragePermissionError,
    translate_error,
)
from .s3_client import build_driver, driver_config

__all__ = [
    "NOT_FOUND_CODE",
    "BucketNotFoundError",
    "ObjectNotFoundError",
    "StorageDriver",
    "StorageError",
    "StoragePermissionError",
    "build_driver",
    "driver_config",
    "translate_error",
]
