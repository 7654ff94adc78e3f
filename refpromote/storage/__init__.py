"""Storage collaborator interface, models and errors.

The promoter talks to object storage only through the StorageService
protocol. MemoryStorageService is a dict-backed implementation for
tests and local development.
"""

from .errors import (
    ObjectNotFoundError,
    PromoteFailedError,
    StorageError,
)
from .memory import MemoryStorageService
from .models import (
    DEFAULT_EXTENSION,
    METADATA_KEY_ORIGINAL_FILENAME,
    ObjectInfo,
    generate_temp_key,
    is_temp_key,
    permanent_key,
)
from .service import StorageService

__all__ = [
    "DEFAULT_EXTENSION",
    "METADATA_KEY_ORIGINAL_FILENAME",
    "MemoryStorageService",
    "ObjectInfo",
    "ObjectNotFoundError",
    "PromoteFailedError",
    "StorageError",
    "StorageService",
    "generate_temp_key",
    "is_temp_key",
    "permanent_key",
]
