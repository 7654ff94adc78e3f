"""Tests for the in-memory storage service."""

import pytest

from refpromote.storage import (
    METADATA_KEY_ORIGINAL_FILENAME,
    MemoryStorageService,
    ObjectNotFoundError,
    PromoteFailedError,
    StorageService,
    is_temp_key,
)


class TestMemoryStorageBasic:
    """Test put/get/stat."""

    def test_implements_protocol(self):
        assert isinstance(MemoryStorageService(), StorageService)

    @pytest.mark.asyncio
    async def test_put_and_get(self):
        storage = MemoryStorageService()

        info = await storage.put_object(
            "docs/a.txt", b"hello", "text/plain", {"owner": "me"}
        )

        assert info.bucket == "memory"
        assert info.key == "docs/a.txt"
        assert info.size == 5
        assert info.content_type == "text/plain"
        assert info.metadata == {"owner": "me"}
        assert await storage.get_object("docs/a.txt") == b"hello"
        assert "docs/a.txt" in storage

    @pytest.mark.asyncio
    async def test_custom_bucket(self):
        storage = MemoryStorageService(bucket="media")
        info = await storage.put_object("a", b"")
        assert storage.bucket == "media"
        assert info.bucket == "media"

    @pytest.mark.asyncio
    async def test_get_missing(self):
        storage = MemoryStorageService()
        with pytest.raises(ObjectNotFoundError):
            await storage.get_object("missing")

    @pytest.mark.asyncio
    async def test_stat(self):
        storage = MemoryStorageService()
        await storage.put_object("a.bin", b"1234")

        info = await storage.stat_object("a.bin")

        assert info.size == 4
        assert info.last_modified is not None
        assert info.etag

    @pytest.mark.asyncio
    async def test_stat_missing(self):
        with pytest.raises(ObjectNotFoundError):
            await MemoryStorageService().stat_object("missing")


class TestMemoryStorageUpload:
    """Test temp uploads."""

    @pytest.mark.asyncio
    async def test_upload_uses_temp_key(self):
        storage = MemoryStorageService()

        info = await storage.upload("photo.png", b"png", "image/png")

        assert is_temp_key(info.key)
        assert info.key.endswith(".png")
        assert info.metadata[METADATA_KEY_ORIGINAL_FILENAME] == "photo.png"
        assert await storage.get_object(info.key) == b"png"

    @pytest.mark.asyncio
    async def test_upload_then_promote(self):
        storage = MemoryStorageService()
        uploaded = await storage.upload("doc.pdf", b"pdf")

        info = await storage.promote_object(uploaded.key)

        assert info is not None
        assert info.key == uploaded.key.removeprefix("temp/")
        assert info.metadata[METADATA_KEY_ORIGINAL_FILENAME] == "doc.pdf"
        assert uploaded.key not in storage
        assert await storage.get_object(info.key) == b"pdf"


class TestMemoryStorageCopyMove:
    """Test copy, move and promote."""

    @pytest.mark.asyncio
    async def test_copy(self):
        storage = MemoryStorageService()
        await storage.put_object("a", b"x", metadata={"k": "v"})

        info = await storage.copy_object("a", "b")

        assert info.key == "b"
        assert info.metadata == {"k": "v"}
        assert "a" in storage
        assert "b" in storage

    @pytest.mark.asyncio
    async def test_copy_missing(self):
        with pytest.raises(ObjectNotFoundError):
            await MemoryStorageService().copy_object("a", "b")

    @pytest.mark.asyncio
    async def test_move(self):
        storage = MemoryStorageService()
        await storage.put_object("a", b"x")

        await storage.move_object("a", "b")

        assert "a" not in storage
        assert await storage.get_object("b") == b"x"

    @pytest.mark.asyncio
    async def test_promote(self):
        storage = MemoryStorageService()
        await storage.put_object("temp/2025/01/15/a.jpg", b"x")

        info = await storage.promote_object("temp/2025/01/15/a.jpg")

        assert info is not None
        assert info.key == "2025/01/15/a.jpg"
        assert storage.keys() == ["2025/01/15/a.jpg"]

    @pytest.mark.asyncio
    async def test_promote_non_temp_is_noop(self):
        storage = MemoryStorageService()
        await storage.put_object("2025/a.jpg", b"x")

        assert await storage.promote_object("2025/a.jpg") is None
        assert storage.keys() == ["2025/a.jpg"]

    @pytest.mark.asyncio
    async def test_promote_missing(self):
        with pytest.raises(PromoteFailedError) as exc_info:
            await MemoryStorageService().promote_object("temp/missing.jpg")
        assert isinstance(exc_info.value.__cause__, ObjectNotFoundError)


class TestMemoryStorageDeleteList:
    """Test delete and list."""

    @pytest.mark.asyncio
    async def test_delete(self):
        storage = MemoryStorageService()
        await storage.put_object("a", b"x")

        await storage.delete_object("a")
        await storage.delete_object("a")

        assert len(storage) == 0

    @pytest.mark.asyncio
    async def test_delete_objects(self):
        storage = MemoryStorageService()
        for key in ("a", "b", "c"):
            await storage.put_object(key, b"x")

        await storage.delete_objects(["a", "c", "missing"])

        assert storage.keys() == ["b"]

    @pytest.mark.asyncio
    async def test_list_prefix(self):
        storage = MemoryStorageService()
        for key in ("docs/a.txt", "docs/sub/b.txt", "img/c.png"):
            await storage.put_object(key, b"x")

        recursive = await storage.list_objects("docs/")
        flat = await storage.list_objects("docs/", recursive=False)

        assert [i.key for i in recursive] == ["docs/a.txt", "docs/sub/b.txt"]
        assert [i.key for i in flat] == ["docs/a.txt"]

    @pytest.mark.asyncio
    async def test_list_max_keys(self):
        storage = MemoryStorageService()
        for key in ("a", "b", "c"):
            await storage.put_object(key, b"x")

        assert len(await storage.list_objects(max_keys=2)) == 2
