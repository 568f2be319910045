"""S3-compatible storage driver construction.

Works with AWS S3, MinIO, and other S3-compatible services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config

if TYPE_CHECKING:
    from cube.common.options import CubeOptions

logger = logging.getLogger("cube.storage")


def driver_config(options: "CubeOptions") -> dict[str, Any]:
    """Keyword arguments handed to ``boto3.client("s3", ...)``."""
    connection = options.connection
    addressing_style = "path" if options.location.path else "auto"
    return {
        "endpoint_url": connection.endpoint,
        "region_name": connection.region,
        "aws_access_key_id": connection.access,
        "aws_secret_access_key": connection.secret,
        "config": Config(s3={"addressing_style": addressing_style}),
    }


def build_driver(options: "CubeOptions") -> Any:
    """Create a boto3 S3 client from validated options."""
    kwargs = driver_config(options)
    logger.debug(
        "building s3 driver region=%s endpoint=%s",
        kwargs["region_name"],
        kwargs["endpoint_url"] or "<aws>",
    )
    return boto3.client("s3", **kwargs)
