"""Gallery publishing."""

import logging
from dataclasses import dataclass

from commission_desk.domain.records import (
    GALLERY,
    GalleryItem,
    new_record_id,
    utc_timestamp,
)
from commission_desk.services.store import CollectionStore, Record
from commission_desk.services.uploads import ByteSource, UploadService

logger = logging.getLogger(__name__)


@dataclass
class GalleryService:
    """Lists and publishes gallery images."""

    store: CollectionStore
    upload_service: UploadService

    def list_items(self) -> list[Record]:
        """Return gallery items, newest first."""
        return self.store.read_collection(GALLERY)

    async def publish(
        self,
        title: str | None,
        category: str | None,
        file: ByteSource,
        content_type: str | None,
        filename: str | None,
    ) -> Record:
        """Store an uploaded image and add it to the head of the gallery."""
        stored = await self.upload_service.store_stream(file, content_type, filename)
        item = GalleryItem(
            id=new_record_id("g"),
            title=(title or "").strip() or "Untitled",
            category=(category or "").strip() or "other",
            url=stored.url,
            thumb_url=stored.url,
            created_at=utc_timestamp(),
        )
        try:
            record = self.store.append_record(GALLERY, item.to_record())
        except Exception:
            await self.upload_service.discard([stored])
            raise
        logger.info("Published gallery item", extra={"item_id": item.id})
        return record
