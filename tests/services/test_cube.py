"""Tests for the Cube facade against the in-memory driver."""

from __future__ import annotations

import io

import pytest

from cube.infra.storage.client import (
    ObjectNotFoundError,
    StorageError,
    StoragePermissionError,
)
from cube.services.cube import Cube, ExistsResult

from tests.services.mock_storage import MockStorageDriver, client_error

BUCKET = "bucket"


async def _read(cube: Cube, key: str) -> bytes:
    res = await cube.get(key)
    return res.stream.read()


class TestPath:
    def test_path_style(self, driver):
        cube = Cube(
            {
                "connection": {
                    "access": "a",
                    "secret": "s",
                    "bucket": "bucket",
                    "region": "region",
                },
                "location": {"path": True, "base": "base"},
            },
            driver=driver,
        )

        assert cube.root == "base/bucket"
        assert cube.path("file.txt") == "base/bucket/file.txt"
        assert cube.path("avatars/1") == "base/bucket/avatars/1"

    def test_virtual_hosted_style(self, driver):
        cube = Cube(
            {
                "connection": {
                    "access": "a",
                    "secret": "s",
                    "bucket": "bucket",
                    "region": "region",
                },
                "location": {"path": False, "base": "{bucket}.{region}.base"},
            },
            driver=driver,
        )

        assert cube.path("file.txt") == "bucket.region.base/file.txt"
        assert cube.path("avatars/1") == "bucket.region.base/avatars/1"

    def test_placeholders_substituted_once(self, driver):
        cube = Cube(
            {
                "connection": {
                    "access": "a",
                    "secret": "s",
                    "bucket": "bucket",
                    "region": "region",
                },
                "location": {"base": "{bucket}.{region}/{bucket}-{region}"},
            },
            driver=driver,
        )

        assert cube.root == "bucket.region/{bucket}-{region}"

    def test_default_location_is_virtual_hosted_aws(self, driver):
        cube = Cube(
            {
                "connection": {
                    "access": "a",
                    "secret": "s",
                    "bucket": "photos",
                    "region": "eu-west-1",
                }
            },
            driver=driver,
        )

        assert cube.path("a b.png") == "https://photos.s3.amazonaws.com/a b.png"

    def test_path_needs_no_driver_call(self, cube, driver):
        cube.path("file.txt")

        assert driver.calls == []


class TestPut:
    @pytest.mark.asyncio
    async def test_put_from_string(self, cube):
        res = await cube.put("file.txt", "hello world")

        assert isinstance(res.raw, dict)
        assert res.raw["ContentLength"] == 11
        assert await _read(cube, "file.txt") == b"hello world"

    @pytest.mark.asyncio
    async def test_put_from_bytes(self, cube):
        data = "héllo wörld".encode("utf-8")

        await cube.put("file.txt", data)

        assert await _read(cube, "file.txt") == data

    @pytest.mark.asyncio
    async def test_put_from_stream(self, cube):
        data = b"\x00\x01binary\xff" * 100

        await cube.put("file.bin", io.BytesIO(data))

        assert await _read(cube, "file.bin") == data

    @pytest.mark.asyncio
    async def test_put_uses_managed_upload(self, cube, driver):
        await cube.put("file.txt", b"x")

        assert driver.called("upload_fileobj") == [{"Bucket": BUCKET, "Key": "file.txt"}]

    @pytest.mark.asyncio
    async def test_put_rejects_unsupported_content(self, cube):
        with pytest.raises(TypeError):
            await cube.put("file.txt", 42)

    @pytest.mark.asyncio
    async def test_put_overwrites(self, cube):
        await cube.put("file.txt", "one")
        await cube.put("file.txt", "three")

        assert await _read(cube, "file.txt") == b"three"

    @pytest.mark.asyncio
    async def test_put_succeeds_when_follow_up_head_fails(self, cube, driver, caplog):
        driver.failures["head_object"] = client_error(
            "AccessDenied", "HeadObject", status=403
        )

        with caplog.at_level("WARNING", logger="cube.storage"):
            res = await cube.put("file.txt", "data")

        assert res.raw is None
        assert await _read(cube, "file.txt") == b"data"
        assert any("put_head_failed" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_put_into_missing_bucket_fails(self, options):
        cube = Cube(options, driver=MockStorageDriver())

        with pytest.raises(StorageError) as info:
            await cube.put("file.txt", "data")

        assert info.value.code == "NoSuchBucket"


class TestGet:
    @pytest.mark.asyncio
    async def test_get_returns_stream_and_raw(self, cube):
        await cube.put("file.txt", "hello world")

        res = await cube.get("file.txt")

        assert res.raw["ContentLength"] == 11
        assert res.stream.read().decode("utf-8") == "hello world"

    @pytest.mark.asyncio
    async def test_get_missing_raises_no_such_key(self, cube):
        with pytest.raises(ObjectNotFoundError) as info:
            await cube.get("missing.txt")

        assert str(info.value) == "NoSuchKey"
        assert info.value.code == "NoSuchKey"
        assert info.value.key == "missing.txt"
        assert info.value.raw is info.value.__cause__


class TestMeta:
    @pytest.mark.asyncio
    async def test_meta_size_matches_bytes_written(self, cube):
        data = "hello wörld"
        await cube.put("file.txt", data)

        res = await cube.meta("file.txt")

        assert res.size == len(data.encode("utf-8"))
        assert res.modified is not None
        assert res.raw["ETag"]

    @pytest.mark.asyncio
    async def test_meta_tracks_latest_put(self, cube):
        await cube.put("file.txt", "short")
        await cube.put("file.txt", "a much longer body")

        res = await cube.meta("file.txt")

        assert res.size == len("a much longer body")

    @pytest.mark.asyncio
    async def test_meta_missing_fails_like_get(self, cube):
        with pytest.raises(ObjectNotFoundError) as info:
            await cube.meta("missing.txt")

        assert str(info.value) == "NoSuchKey"


class TestExists:
    @pytest.mark.asyncio
    async def test_exists_before_and_after_put(self, cube):
        before = await cube.exists("file.txt")
        await cube.put("file.txt", "hello world")
        after = await cube.exists("file.txt")

        assert before.exists is False
        assert after.exists is True
        assert after.size == 11

    @pytest.mark.asyncio
    async def test_exists_missing_does_not_raise(self, cube):
        res = await cube.exists("missing.txt")

        assert isinstance(res, ExistsResult)
        assert res.exists is False
        assert isinstance(res.raw, ObjectNotFoundError)

    @pytest.mark.asyncio
    async def test_exists_reports_other_failures_as_absent(self, cube, driver, caplog):
        await cube.put("file.txt", "hello")
        driver.failures["head_object"] = client_error("AccessDenied", "HeadObject", status=403)

        with caplog.at_level("WARNING", logger="cube.storage"):
            res = await cube.exists("file.txt")

        assert res.exists is False
        assert isinstance(res.raw, StoragePermissionError)
        assert any("exists_check_failed" in r.getMessage() for r in caplog.records)


class TestCopyMoveDelete:
    @pytest.mark.asyncio
    async def test_copy(self, cube, driver):
        await cube.put("orig/file.txt", "hello world")
        assert (await cube.exists("copy/file.txt")).exists is False

        res = await cube.copy("orig/file.txt", "copy/file.txt")

        assert "CopyObjectResult" in res.raw
        assert (await cube.exists("orig/file.txt")).exists is True
        assert (await cube.exists("copy/file.txt")).exists is True
        assert await _read(cube, "copy/file.txt") == b"hello world"
        assert driver.called("copy_object")[0]["CopySource"] == "/bucket/orig/file.txt"

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, cube):
        with pytest.raises(ObjectNotFoundError):
            await cube.copy("missing.txt", "copy.txt")

    @pytest.mark.asyncio
    async def test_move(self, cube):
        await cube.put("orig/file.txt", "hello world")

        res = await cube.move("orig/file.txt", "copy/file.txt")

        assert res.copy.raw and res.delete.raw
        assert (await cube.exists("orig/file.txt")).exists is False
        assert (await cube.exists("copy/file.txt")).exists is True
        assert await _read(cube, "copy/file.txt") == b"hello world"

    @pytest.mark.asyncio
    async def test_move_failed_delete_leaves_duplicate(self, cube, driver, caplog):
        await cube.put("orig/file.txt", "hello world")
        driver.failures["delete_object"] = client_error("AccessDenied", "DeleteObject", status=403)

        with caplog.at_level("WARNING", logger="cube.storage"):
            with pytest.raises(StoragePermissionError):
                await cube.move("orig/file.txt", "copy/file.txt")

        assert (await cube.exists("orig/file.txt")).exists is True
        assert (await cube.exists("copy/file.txt")).exists is True
        assert any("move_left_duplicate" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_delete(self, cube):
        await cube.put("file.txt", "hello world")

        res = await cube.delete("file.txt")

        assert isinstance(res.raw, dict)
        assert (await cube.exists("file.txt")).exists is False

    @pytest.mark.asyncio
    async def test_delete_missing_succeeds(self, cube):
        res = await cube.delete("missing.txt")

        assert isinstance(res.raw, dict)


class TestConstruction:
    def test_bucket_shares_driver(self, cube, driver):
        assert cube.driver is driver
        assert cube.bucket.driver is driver
        assert cube.bucket.name == BUCKET

    def test_builds_driver_when_not_injected(self, options, monkeypatch):
        built = MockStorageDriver()
        monkeypatch.setattr("cube.services.cube.build_driver", lambda opts: built)

        cube = Cube(options)

        assert cube.driver is built
