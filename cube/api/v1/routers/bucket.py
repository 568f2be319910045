from __future__ import annotations

from fastapi import APIRouter, Depends, status

from cube.api.v1.deps import get_cube, require_admin_key
from cube.api.v1.schemas.files import BucketEmptyOut
from cube.services.cube import Cube

router = APIRouter()


@router.post(
    "/bucket",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Create bucket",
    description="Create the configured bucket unless it already exists.",
)
async def create_bucket(cube: Cube = Depends(get_cube)) -> None:
    await cube.bucket.create()


@router.post(
    "/bucket/empty",
    response_model=BucketEmptyOut,
    summary="Empty bucket",
)
async def empty_bucket(cube: Cube = Depends(get_cube)) -> BucketEmptyOut:
    deleted = await cube.bucket.empty()
    return BucketEmptyOut(deleted=deleted)


@router.delete(
    "/bucket",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete bucket",
    description="Empty and delete the configured bucket.",
    dependencies=[Depends(require_admin_key)],
)
async def delete_bucket(cube: Cube = Depends(get_cube)) -> None:
    await cube.bucket.delete()
