"""Image upload validation and re-encoding."""

import asyncio
import io
import logging
import secrets
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from PIL import Image, ImageOps, UnidentifiedImageError

from commission_desk.domain.errors import (
    InvalidImageError,
    TooLargeError,
    UnsupportedTypeError,
)

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
# Multi-picture JPEGs from phone cameras open as MPO.
_DECODABLE_FORMATS = frozenset({"JPEG", "MPO", "PNG", "WEBP"})
_OUTPUT_FORMAT = "JPEG"
_OUTPUT_EXTENSION = ".jpg"
_OUTPUT_MIME = "image/jpeg"
_READ_CHUNK_SIZE = 64 * 1024


class ByteSource(Protocol):
    """Anything with an async ``read`` such as FastAPI's ``UploadFile``."""

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes."""


class AssetStorage(Protocol):
    """Destination for stored image files."""

    async def save(self, filename: str, data: bytes) -> None:
        """Persist ``data`` under ``filename``."""

    async def delete(self, filename: str) -> None:
        """Remove ``filename`` if it exists."""


@dataclass(frozen=True)
class StoredUpload:
    """An image written to the public asset directory."""

    filename: str
    url: str
    mime: str
    size: int


@dataclass
class UploadService:
    """Validates uploads and stores them as metadata-free JPEG files."""

    storage: AssetStorage
    max_bytes: int
    max_dimension: int
    max_pixels: int
    public_prefix: str = "/uploads"

    async def store_stream(
        self, source: ByteSource, declared_mime: str | None, original_name: str | None
    ) -> StoredUpload:
        """Read ``source`` in chunks, stopping once the size cap is exceeded."""
        self.check_type(declared_mime, original_name)
        buffer = bytearray()
        while True:
            chunk = await source.read(_READ_CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > self.max_bytes:
                logger.info(
                    "Rejected oversized upload",
                    extra={"original_name": original_name, "limit": self.max_bytes},
                )
                raise TooLargeError(self._too_large_message())
        return await self.store(bytes(buffer), declared_mime, original_name)

    async def store(
        self, data: bytes, declared_mime: str | None, original_name: str | None
    ) -> StoredUpload:
        """Validate, re-encode and persist an image."""
        self.check_type(declared_mime, original_name)
        if not data:
            raise UnsupportedTypeError("Uploaded file is empty")
        if len(data) > self.max_bytes:
            raise TooLargeError(self._too_large_message())
        encoded = await asyncio.to_thread(self._reencode, data)
        filename = _new_filename()
        await self.storage.save(filename, encoded)
        logger.info(
            "Stored upload",
            extra={
                "stored_as": filename,
                "original_name": original_name,
                "bytes_in": len(data),
                "bytes_out": len(encoded),
            },
        )
        return StoredUpload(
            filename=filename,
            url=f"{self.public_prefix}/{filename}",
            mime=_OUTPUT_MIME,
            size=len(encoded),
        )

    async def discard(self, uploads: Sequence[StoredUpload]) -> None:
        """Delete files stored for a submission that was not saved."""
        for upload in uploads:
            await self.storage.delete(upload.filename)
        if uploads:
            logger.info(
                "Discarded orphaned uploads", extra={"discarded": len(uploads)}
            )

    def check_type(self, declared_mime: str | None, original_name: str | None) -> None:
        """Raise UnsupportedTypeError unless the declared MIME type is allowed."""
        mime = (declared_mime or "").split(";", 1)[0].strip().lower()
        if mime not in ALLOWED_MIME_TYPES:
            logger.info(
                "Rejected upload type",
                extra={"declared_mime": declared_mime, "original_name": original_name},
            )
            raise UnsupportedTypeError("Only PNG/JPG/WEBP allowed")

    def _too_large_message(self) -> str:
        limit_mb = self.max_bytes / (1024 * 1024)
        return f"File too large (max {limit_mb:g} MB)"

    def _reencode(self, data: bytes) -> bytes:
        """Decode, strip metadata, cap dimensions and encode as JPEG."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                if img.format not in _DECODABLE_FORMATS:
                    raise InvalidImageError("File is not a PNG, JPEG or WEBP image")
                width, height = img.size
                if width * height > self.max_pixels:
                    raise InvalidImageError("Image dimensions are too large")
                img.load()
                image = ImageOps.exif_transpose(img)
                image = _flatten(image)
                image.thumbnail(
                    (self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS
                )
                out = io.BytesIO()
                image.save(out, format=_OUTPUT_FORMAT, quality=85, optimize=True)
                return out.getvalue()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise InvalidImageError("Could not read image") from exc


def _flatten(image: Image.Image) -> Image.Image:
    """Return an RGB image, compositing any transparency onto white."""
    has_alpha = image.mode in {"RGBA", "LA"} or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _new_filename() -> str:
    stamp = time.time_ns() // 1_000_000
    return f"img_{stamp}_{secrets.token_hex(6)}{_OUTPUT_EXTENSION}"
