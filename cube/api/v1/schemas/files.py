"""Pydantic schemas for the file and bucket endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class FileWriteOut(BaseModel):
    """Response model for an uploaded file."""

    key: str
    size: int | None = None
    etag: str | None = None
    path: str


class FileMetaOut(BaseModel):
    """Size and modification time of a stored file."""

    key: str
    size: int | None = None
    modified: datetime | None = None


class FileExistsOut(BaseModel):
    key: str
    exists: bool
    size: int | None = None
    modified: datetime | None = None


class FilePathOut(BaseModel):
    key: str
    path: str


class FileTransfer(BaseModel):
    """Request body for copy and move."""

    source: str = Field(min_length=1)
    target: str = Field(min_length=1)


class BucketEmptyOut(BaseModel):
    deleted: int
