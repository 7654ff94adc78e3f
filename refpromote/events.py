"""File events emitted by the promoter.

One event is published per promoted or deleted reference, never batched.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, runtime_checkable
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .meta import MetaType
from .types import StorageKey

# Event type shared by all file events
FILE_EVENT_TYPE = "storage.file"

# Default event source
DEFAULT_EVENT_SOURCE = "refpromote"


def _event_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FileOperation(str, Enum):
    """Operation applied to a stored file."""

    PROMOTE = "promote"
    DELETE = "delete"


class FileEvent(BaseModel):
    """Immutable record of one file promotion or deletion."""

    model_config = ConfigDict(frozen=True)

    operation: FileOperation
    meta_type: MetaType
    file_key: StorageKey
    """Resulting key: the permanent key for promotions, the removed key for deletions."""
    attrs: dict[str, str] = Field(default_factory=dict)

    # Envelope
    event_type: str = FILE_EVENT_TYPE
    id: str = Field(default_factory=_event_id)
    source: str = DEFAULT_EVENT_SOURCE
    time: datetime = Field(default_factory=_now)


@runtime_checkable
class EventPublisher(Protocol):
    """Event bus interface consumed by the promoter. Fire-and-forget."""

    def publish(self, event: FileEvent) -> None: ...
