"""Storage error types."""


class StorageError(Exception):
    """Base exception for storage operations."""


class ObjectNotFoundError(StorageError):
    """Object not found in storage."""

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class PromoteFailedError(StorageError):
    """Moving a temp object to its permanent key failed."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Promote failed for {key}: {message}")
        self.key = key
