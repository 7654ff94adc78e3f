"""Storage data models and key helpers.

Temp uploads live under the ``temp/`` prefix until a record that
references them is saved; promotion moves them to the same key with
the prefix stripped.
"""

from datetime import datetime, timezone
from pathlib import PurePosixPath
from uuid import uuid4

from pydantic import BaseModel, Field

from ..types import TEMP_PREFIX, BucketName, StorageKey

# Date partition used for generated temp keys
TEMP_KEY_DATE_FORMAT = "%Y/%m/%d"

# Extension used when an uploaded filename has none
DEFAULT_EXTENSION = ".bin"

# Metadata key holding the client-side filename of an upload
METADATA_KEY_ORIGINAL_FILENAME = "original_filename"


class ObjectInfo(BaseModel):
    """Metadata for a stored object."""

    bucket: BucketName
    key: StorageKey
    etag: str = ""
    size: int = Field(default=0, ge=0)
    content_type: str | None = None
    last_modified: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


def is_temp_key(key: str) -> bool:
    """Check whether a key refers to a pending upload."""
    return key.startswith(TEMP_PREFIX)


def permanent_key(key: str) -> str:
    """Strip exactly one temp prefix from a key.

    Keys without the prefix are returned unchanged.
    """
    if is_temp_key(key):
        return key[len(TEMP_PREFIX) :]
    return key


def generate_temp_key(filename: str, now: datetime | None = None) -> str:
    """Generate a unique temp key for an upload.

    Format: temp/YYYY/MM/DD/{uuid}{extension}
    Example: temp/2025/01/15/550e8400-e29b-41d4-a716-446655440000.jpg

    Args:
        filename: Client-side filename, only its extension is kept
        now: Timestamp used for the date partition (default: current UTC time)

    Returns:
        Temp storage key
    """
    if now is None:
        now = datetime.now(timezone.utc)

    ext = PurePosixPath(filename).suffix or DEFAULT_EXTENSION
    return f"{TEMP_PREFIX}{now.strftime(TEMP_KEY_DATE_FORMAT)}/{uuid4()}{ext}"
