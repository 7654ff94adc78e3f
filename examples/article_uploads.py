#!/usr/bin/env python3
"""Example: promoting uploads referenced by an article.

Walks an article through create, update and delete against the in-memory
storage service, printing the storage contents and published events.

Usage:
    python examples/article_uploads.py
"""

import asyncio
import logging
from typing import Annotated

from pydantic import BaseModel

from refpromote import (
    FileEvent,
    MemoryStorageService,
    Meta,
    Promoter,
    PromoterSettings,
)

# ============================================================================
# Record type: fields opt in with Meta declarations
# ============================================================================


class Article(BaseModel):
    title: str
    cover: Annotated[str | None, Meta("uploaded_file=category:cover public:true")] = None
    attachments: Annotated[list[str], Meta("uploaded_file=category:attachment")] = []
    body: Annotated[str, Meta("richtext")] = ""
    notes: Annotated[str, Meta("markdown")] = ""


class PrintingPublisher:
    """Publisher that prints each event."""

    def publish(self, event: FileEvent) -> None:
        print(f"  event: {event.operation.value:<8} {event.file_key} {event.attrs}")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    storage = MemoryStorageService()
    promoter = Promoter(
        Article,
        storage,
        PrintingPublisher(),
        PromoterSettings(event_source="example"),
    )

    # Uploads land under temp/ before the article is saved
    cover = await storage.upload("cover.jpg", b"jpeg", "image/jpeg")
    figure = await storage.upload("figure.png", b"png", "image/png")
    datasheet = await storage.upload("datasheet.pdf", b"pdf", "application/pdf")

    print("Create")
    article = Article(
        title="Release notes",
        cover=cover.key,
        attachments=[datasheet.key],
        body=f'<p>Overview</p><img src="{figure.key}" alt="Figure">',
        notes=f"See [the datasheet]({datasheet.key} \"Datasheet\") or https://example.com",
    )
    await promoter.promote(article)
    print(f"  cover: {article.cover}")
    print(f"  body:  {article.body}")
    print(f"  notes: {article.notes}")
    print(f"  stored: {storage.keys()}")

    print("Update")
    new_cover = await storage.upload("cover-v2.jpg", b"jpeg2", "image/jpeg")
    updated = article.model_copy(deep=True, update={"cover": new_cover.key})
    report = await promoter.promote(updated, article)
    print(f"  deleted: {report.deleted}")
    print(f"  stored: {storage.keys()}")

    print("Delete")
    await promoter.promote(None, updated)
    print(f"  stored: {storage.keys()}")


if __name__ == "__main__":
    asyncio.run(main())
