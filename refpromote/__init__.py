"""refpromote - storage reference promotion for application records.

Uploads land in object storage under a provisional ``temp/`` key. When a
record referencing them is saved, the promoter moves each temp object to
its permanent key, rewrites the record, and deletes files the record no
longer references.

Example:
    from typing import Annotated

    from pydantic import BaseModel

    from refpromote import Meta, MemoryStorageService, Promoter

    class Article(BaseModel):
        cover: Annotated[str, Meta("uploaded_file=category:cover")] = ""
        attachments: Annotated[list[str], Meta("uploaded_file")] = []
        body: Annotated[str, Meta("richtext")] = ""
        summary: Annotated[str | None, Meta("markdown")] = None

    storage = MemoryStorageService()
    promoter = Promoter(Article, storage)

    article = Article(
        cover="temp/2025/01/15/cover.jpg",
        body='<img src="temp/2025/01/15/figure.png">',
    )

    # Create: temp references are promoted and the record rewritten
    await promoter.promote(article)
    assert article.cover == "2025/01/15/cover.jpg"

    # Update: dropped references are deleted
    updated = article.model_copy(update={"cover": "temp/2025/01/16/new.jpg"})
    await promoter.promote(updated, article)

    # Delete: every reference is deleted
    await promoter.promote(None, updated)
"""

from importlib.metadata import PackageNotFoundError, version

from .config import PromoterSettings
from .content import (
    extract_html_urls,
    extract_markdown_urls,
    extract_urls,
    is_relative_url,
    replace_html_urls,
    replace_markdown_urls,
    replace_urls,
)
from .errors import MetaDeclarationError, PromoterError, PromotionError
from .events import EventPublisher, FileEvent, FileOperation
from .fields import FieldDescriptor, scan_fields
from .meta import Meta, MetaSpec, MetaType, parse_meta
from .promoter import CleanupFailure, Promoter, PromotionReport, Scenario
from .storage import (
    MemoryStorageService,
    ObjectInfo,
    ObjectNotFoundError,
    PromoteFailedError,
    StorageError,
    StorageService,
    generate_temp_key,
    is_temp_key,
    permanent_key,
)
from .types import TEMP_PREFIX

try:
    __version__ = version("refpromote")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "TEMP_PREFIX",
    "CleanupFailure",
    "EventPublisher",
    "FieldDescriptor",
    "FileEvent",
    "FileOperation",
    "MemoryStorageService",
    "Meta",
    "MetaDeclarationError",
    "MetaSpec",
    "MetaType",
    "ObjectInfo",
    "ObjectNotFoundError",
    "PromoteFailedError",
    "Promoter",
    "PromoterError",
    "PromoterSettings",
    "PromotionError",
    "PromotionReport",
    "Scenario",
    "StorageError",
    "StorageService",
    # Version
    "__version__",
    "extract_html_urls",
    "extract_markdown_urls",
    "extract_urls",
    "generate_temp_key",
    "is_relative_url",
    "is_temp_key",
    "parse_meta",
    "permanent_key",
    "replace_html_urls",
    "replace_markdown_urls",
    "replace_urls",
    "scan_fields",
]
