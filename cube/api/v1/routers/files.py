"""File API router.

Exposes the facade's per-object operations. Keys are taken verbatim from
the path and may contain slashes.
"""

from __future__ import annotations

from tempfile import SpooledTemporaryFile
from typing import Any, Iterator

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from cube.api.v1.deps import get_cube
from cube.api.v1.schemas.files import (
    FileExistsOut,
    FileMetaOut,
    FilePathOut,
    FileTransfer,
    FileWriteOut,
)
from cube.infra.storage.client import ObjectNotFoundError
from cube.services.cube import Cube, PutResult

router = APIRouter()

STREAM_CHUNK_BYTES = 64 * 1024
# request bodies above this size are spooled to disk
SPOOL_MAX_BYTES = 1024 * 1024


def _iter_body(body: Any) -> Iterator[bytes]:
    try:
        yield from body.iter_chunks(STREAM_CHUNK_BYTES)
    finally:
        body.close()


def _write_out(cube: Cube, key: str, result: PutResult) -> FileWriteOut:
    raw = result.raw or {}
    return FileWriteOut(
        key=key,
        size=raw.get("ContentLength"),
        etag=raw.get("ETag"),
        path=cube.path(key),
    )


@router.put(
    "/files/{key:path}",
    response_model=FileWriteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload file",
    description=(
        "Store the raw request body at the given key. The body is spooled to a "
        "temporary file past 1 MiB, then uploaded."
    ),
)
async def put_file(
    key: str,
    request: Request,
    cube: Cube = Depends(get_cube),
) -> FileWriteOut:
    with SpooledTemporaryFile(max_size=SPOOL_MAX_BYTES) as spool:
        async for chunk in request.stream():
            spool.write(chunk)
        spool.seek(0)
        result = await cube.put(key, spool)
    return _write_out(cube, key, result)


@router.post(
    "/uploads/{key:path}",
    response_model=FileWriteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload file (multipart form)",
    description="Stream the `file` form field to the given key.",
)
async def upload_file(
    key: str,
    file: UploadFile = File(...),
    cube: Cube = Depends(get_cube),
) -> FileWriteOut:
    result = await cube.put(key, file)
    return _write_out(cube, key, result)


@router.get(
    "/files/{key:path}",
    summary="Download file",
    description="Stream the stored object.",
)
async def get_file(key: str, cube: Cube = Depends(get_cube)) -> StreamingResponse:
    try:
        result = await cube.get(key)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    raw = result.raw
    headers: dict[str, str] = {}
    if raw.get("ContentLength") is not None:
        headers["Content-Length"] = str(raw["ContentLength"])
    if raw.get("ETag"):
        headers["ETag"] = raw["ETag"]
    return StreamingResponse(
        _iter_body(result.stream),
        media_type=raw.get("ContentType") or "application/octet-stream",
        headers=headers,
    )


@router.delete(
    "/files/{key:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete file",
    description="Delete the object; deleting an absent key succeeds.",
)
async def delete_file(key: str, cube: Cube = Depends(get_cube)) -> None:
    await cube.delete(key)


@router.get(
    "/meta/{key:path}",
    response_model=FileMetaOut,
    summary="Get file metadata",
)
async def get_file_meta(key: str, cube: Cube = Depends(get_cube)) -> FileMetaOut:
    try:
        meta = await cube.meta(key)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FileMetaOut(key=key, size=meta.size, modified=meta.modified)


@router.get(
    "/exists/{key:path}",
    response_model=FileExistsOut,
    summary="Check file existence",
)
async def file_exists(key: str, cube: Cube = Depends(get_cube)) -> FileExistsOut:
    result = await cube.exists(key)
    return FileExistsOut(
        key=key, exists=result.exists, size=result.size, modified=result.modified
    )


@router.get(
    "/paths/{key:path}",
    response_model=FilePathOut,
    summary="Get public path",
)
async def file_path(key: str, cube: Cube = Depends(get_cube)) -> FilePathOut:
    return FilePathOut(key=key, path=cube.path(key))


@router.post(
    "/copy",
    response_model=FilePathOut,
    summary="Copy file",
)
async def copy_file(
    payload: FileTransfer, cube: Cube = Depends(get_cube)
) -> FilePathOut:
    try:
        await cube.copy(payload.source, payload.target)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FilePathOut(key=payload.target, path=cube.path(payload.target))


@router.post(
    "/move",
    response_model=FilePathOut,
    summary="Move file",
    description="Copy then delete the source. Not atomic.",
)
async def move_file(
    payload: FileTransfer, cube: Cube = Depends(get_cube)
) -> FilePathOut:
    try:
        await cube.move(payload.source, payload.target)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FilePathOut(key=payload.target, path=cube.path(payload.target))
