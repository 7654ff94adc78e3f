"""Common annotated types for field validation.

These types provide consistent validation patterns across the package.
"""

from typing import Annotated

from pydantic import Field

# Prefix marking a provisional upload awaiting promotion
TEMP_PREFIX = "temp/"

# Storage key - object key within a bucket (e.g., "2025/01/15/avatar.jpg")
StorageKey = Annotated[str, Field(min_length=1)]

# Field name - attribute name of an annotated record field
FieldName = Annotated[str, Field(min_length=1)]

# Bucket name reported in object info
BucketName = Annotated[str, Field(min_length=1)]
