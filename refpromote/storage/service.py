"""Storage collaborator interface.

The promoter only needs promotion and deletion; concrete providers
(object stores, filesystems) implement the rest of their API as they see fit.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import ObjectInfo


@runtime_checkable
class StorageService(Protocol):
    """Storage operations consumed by the promoter."""

    async def promote_object(self, temp_key: str) -> ObjectInfo | None:
        """
        Move a temp object to its permanent key.

        Args:
            temp_key: Key carrying the temp prefix

        Returns:
            ObjectInfo for the permanent object, or None if the key
            has no temp prefix (nothing to do)

        Raises:
            Exception: Promotion failed
        """
        ...

    async def delete_object(self, key: str) -> None:
        """Delete a single object."""
        ...

    async def delete_objects(self, keys: Sequence[str]) -> None:
        """Delete several objects in one request."""
        ...
