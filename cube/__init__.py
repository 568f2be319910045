"""S3 object storage facade for FastAPI applications."""

from cube.common.options import CubeOptions, OptionsError
from cube.infra.storage.client import ObjectNotFoundError, StorageError
from cube.plugin import Plugin, PluginError, get_cube
from cube.services.bucket import Bucket
from cube.services.cube import Cube

__all__ = [
    "Bucket",
    "Cube",
    "CubeOptions",
    "ObjectNotFoundError",
    "OptionsError",
    "Plugin",
    "PluginError",
    "StorageError",
    "get_cube",
]
