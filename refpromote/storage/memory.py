"""In-memory storage service.

Intended for tests and local development. Objects are kept in a dict
keyed by storage key.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import time_ns

from .errors import ObjectNotFoundError, PromoteFailedError
from .models import (
    METADATA_KEY_ORIGINAL_FILENAME,
    ObjectInfo,
    generate_temp_key,
    is_temp_key,
    permanent_key,
)

DEFAULT_BUCKET = "memory"


@dataclass
class _StoredObject:
    data: bytes
    content_type: str | None
    metadata: dict[str, str]
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    etag: str = field(default_factory=lambda: str(time_ns()))


class MemoryStorageService:
    """Storage service backed by a dict.

    Implements the StorageService protocol plus the basic object
    operations needed to seed and inspect test fixtures.
    """

    def __init__(self, bucket: str = DEFAULT_BUCKET):
        self._bucket = bucket
        self._objects: dict[str, _StoredObject] = {}

    @property
    def bucket(self) -> str:
        """Get bucket name reported in object info."""
        return self._bucket

    def __contains__(self, key: object) -> bool:
        return key in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def keys(self) -> list[str]:
        """Get all stored keys in insertion order."""
        return list(self._objects)

    def _info(self, key: str, obj: _StoredObject) -> ObjectInfo:
        return ObjectInfo(
            bucket=self._bucket,
            key=key,
            etag=obj.etag,
            size=len(obj.data),
            content_type=obj.content_type,
            last_modified=obj.last_modified,
            metadata=dict(obj.metadata),
        )

    async def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        """Store an object, replacing any existing one at the same key."""
        obj = _StoredObject(
            data=bytes(data),
            content_type=content_type,
            metadata=dict(metadata or {}),
        )
        self._objects[key] = obj
        return self._info(key, obj)

    async def upload(
        self,
        filename: str,
        data: bytes,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ObjectInfo:
        """
        Store a new upload under a generated temp key.

        The client-side filename is recorded in the object metadata.

        Returns:
            ObjectInfo whose key carries the temp prefix
        """
        merged = dict(metadata or {})
        merged[METADATA_KEY_ORIGINAL_FILENAME] = filename
        return await self.put_object(
            generate_temp_key(filename), data, content_type, merged
        )

    async def get_object(self, key: str) -> bytes:
        """
        Get object content.

        Raises:
            ObjectNotFoundError: No object at key
        """
        obj = self._objects.get(key)
        if obj is None:
            raise ObjectNotFoundError(key)
        return obj.data

    async def stat_object(self, key: str) -> ObjectInfo:
        """
        Get object metadata.

        Raises:
            ObjectNotFoundError: No object at key
        """
        obj = self._objects.get(key)
        if obj is None:
            raise ObjectNotFoundError(key)
        return self._info(key, obj)

    async def list_objects(
        self,
        prefix: str = "",
        recursive: bool = True,
        max_keys: int = 0,
    ) -> list[ObjectInfo]:
        """
        List objects under a prefix.

        Args:
            prefix: Key prefix filter
            recursive: Include keys in nested "folders" below the prefix
            max_keys: Maximum number of results (0 for no limit)
        """
        result: list[ObjectInfo] = []
        for key, obj in self._objects.items():
            if not key.startswith(prefix):
                continue
            if not recursive and "/" in key[len(prefix) :]:
                continue
            result.append(self._info(key, obj))
            if max_keys > 0 and len(result) >= max_keys:
                break
        return result

    async def copy_object(self, source_key: str, dest_key: str) -> ObjectInfo:
        """
        Copy an object to a new key.

        Raises:
            ObjectNotFoundError: Source object does not exist
        """
        source = self._objects.get(source_key)
        if source is None:
            raise ObjectNotFoundError(source_key)

        obj = _StoredObject(
            data=source.data,
            content_type=source.content_type,
            metadata=dict(source.metadata),
        )
        self._objects[dest_key] = obj
        return self._info(dest_key, obj)

    async def move_object(self, source_key: str, dest_key: str) -> ObjectInfo:
        """Copy an object to a new key, then delete the source."""
        info = await self.copy_object(source_key, dest_key)
        self._objects.pop(source_key, None)
        return info

    async def delete_object(self, key: str) -> None:
        """Delete an object. Missing keys are ignored."""
        self._objects.pop(key, None)

    async def delete_objects(self, keys: Sequence[str]) -> None:
        """Delete several objects. Missing keys are ignored."""
        for key in keys:
            self._objects.pop(key, None)

    async def promote_object(self, temp_key: str) -> ObjectInfo | None:
        """
        Move a temp object to its permanent key.

        Returns None for keys without the temp prefix.

        Raises:
            PromoteFailedError: Temp object does not exist
        """
        if not is_temp_key(temp_key):
            return None

        try:
            return await self.move_object(temp_key, permanent_key(temp_key))
        except ObjectNotFoundError as exc:
            raise PromoteFailedError(temp_key, "temp object does not exist") from exc
