from .base import BaseService
from .bucket import Bucket
from .cube import (
    CopyResult,
    Cube,
    DeleteResult,
    ExistsResult,
    GetResult,
    MetaResult,
    MoveResult,
    PutResult,
)

__all__ = [
    "BaseService",
    "Bucket",
    "Cube",
    "CopyResult",
    "DeleteResult",
    "ExistsResult",
    "GetResult",
    "MetaResult",
    "MoveResult",
    "PutResult",
]
