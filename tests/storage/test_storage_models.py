"""Tests for storage models, key helpers and errors."""

import re
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from refpromote.storage import (
    DEFAULT_EXTENSION,
    ObjectInfo,
    ObjectNotFoundError,
    PromoteFailedError,
    StorageError,
    generate_temp_key,
    is_temp_key,
    permanent_key,
)


class TestStorageErrors:
    """Test storage error types."""

    def test_storage_error_base(self):
        error = StorageError("base error")
        assert str(error) == "base error"

    def test_object_not_found_error(self):
        error = ObjectNotFoundError("2025/01/15/file.txt")
        assert "Object not found" in str(error)
        assert error.key == "2025/01/15/file.txt"
        assert isinstance(error, StorageError)

    def test_promote_failed_error(self):
        error = PromoteFailedError("temp/a.jpg", "timeout")
        assert "Promote failed" in str(error)
        assert "timeout" in str(error)
        assert error.key == "temp/a.jpg"


class TestObjectInfo:
    """Test ObjectInfo model."""

    def test_create_object_info(self):
        modified = datetime.now(timezone.utc)

        info = ObjectInfo(
            bucket="media",
            key="2025/01/15/avatar.jpg",
            etag="abc",
            size=1024,
            content_type="image/jpeg",
            last_modified=modified,
            metadata={"original_filename": "me.jpg"},
        )

        assert info.bucket == "media"
        assert info.key == "2025/01/15/avatar.jpg"
        assert info.size == 1024
        assert info.content_type == "image/jpeg"
        assert info.last_modified == modified
        assert info.metadata == {"original_filename": "me.jpg"}

    def test_defaults(self):
        info = ObjectInfo(bucket="media", key="a.txt")
        assert info.etag == ""
        assert info.size == 0
        assert info.content_type is None
        assert info.metadata == {}

    def test_empty_key_rejected(self):
        with pytest.raises(ValidationError):
            ObjectInfo(bucket="media", key="")

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            ObjectInfo(bucket="media", key="a.txt", size=-1)


class TestKeyHelpers:
    """Test temp key helpers."""

    def test_is_temp_key(self):
        assert is_temp_key("temp/2025/01/15/a.jpg")
        assert not is_temp_key("2025/01/15/a.jpg")
        assert not is_temp_key("tempfile.jpg")
        assert not is_temp_key("/temp/a.jpg")

    def test_permanent_key(self):
        assert permanent_key("temp/2025/01/15/a.jpg") == "2025/01/15/a.jpg"

    def test_permanent_key_strips_once(self):
        assert permanent_key("temp/temp/a.jpg") == "temp/a.jpg"

    def test_permanent_key_non_temp(self):
        assert permanent_key("2025/a.jpg") == "2025/a.jpg"


class TestGenerateTempKey:
    """Test temp key generation."""

    def test_format(self):
        now = datetime(2025, 1, 15, tzinfo=timezone.utc)

        key = generate_temp_key("photo.jpg", now)

        assert re.fullmatch(r"temp/2025/01/15/[0-9a-f-]{36}\.jpg", key)

    def test_default_extension(self):
        key = generate_temp_key("README")
        assert key.endswith(DEFAULT_EXTENSION)
        assert is_temp_key(key)

    def test_only_last_extension_kept(self):
        key = generate_temp_key("archive.tar.gz")
        assert key.endswith(".gz")

    def test_unique(self):
        assert generate_temp_key("a.png") != generate_temp_key("a.png")
