"""Tests for upload validation and re-encoding."""

import asyncio
import io

import pytest
from PIL import Image

from commission_desk.domain.errors import (
    InvalidImageError,
    TooLargeError,
    UnsupportedTypeError,
)
from commission_desk.services.uploads import UploadService


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


@pytest.mark.parametrize(
    ("fmt", "mime"),
    [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("WEBP", "image/webp")],
)
def test_allowed_types_are_stored_as_jpeg(
    upload_service, asset_storage, make_image, fmt, mime
) -> None:
    stored = asyncio.run(upload_service.store(make_image(fmt), mime, f"art.{fmt}"))

    assert stored.url == f"/uploads/{stored.filename}"
    assert stored.filename.startswith("img_")
    assert stored.filename.endswith(".jpg")
    assert stored.mime == "image/jpeg"
    saved = asset_storage.files[stored.filename]
    assert stored.size == len(saved)
    assert _open(saved).format == "JPEG"


def test_declared_text_plain_is_rejected_before_writing(
    upload_service, asset_storage, make_image
) -> None:
    with pytest.raises(UnsupportedTypeError):
        asyncio.run(upload_service.store(make_image(), "text/plain", "notes.txt"))

    assert asset_storage.files == {}


def test_empty_file_is_rejected(upload_service, asset_storage) -> None:
    with pytest.raises(UnsupportedTypeError):
        asyncio.run(upload_service.store(b"", "image/png", "empty.png"))

    assert asset_storage.files == {}


def test_mime_parameters_and_case_are_ignored(upload_service, make_image) -> None:
    stored = asyncio.run(
        upload_service.store(make_image("PNG"), "Image/PNG; charset=binary", "a.png")
    )

    assert stored.filename.endswith(".jpg")


def test_file_exactly_at_limit_is_accepted(asset_storage, make_image) -> None:
    data = make_image("PNG")
    service = UploadService(
        storage=asset_storage, max_bytes=len(data), max_dimension=64, max_pixels=10_000
    )

    stored = asyncio.run(service.store(data, "image/png", "edge.png"))

    assert stored.filename in asset_storage.files


def test_file_one_byte_over_limit_is_rejected(asset_storage, make_image) -> None:
    data = make_image("PNG")
    service = UploadService(
        storage=asset_storage,
        max_bytes=len(data) - 1,
        max_dimension=64,
        max_pixels=10_000,
    )

    with pytest.raises(TooLargeError):
        asyncio.run(service.store(data, "image/png", "edge.png"))

    assert asset_storage.files == {}


def test_stream_stops_once_limit_exceeded(asset_storage, make_upload) -> None:
    service = UploadService(
        storage=asset_storage, max_bytes=100_000, max_dimension=64, max_pixels=10_000
    )
    upload = make_upload(b"\x00" * 1_000_000, "image/png", "huge.png")

    with pytest.raises(TooLargeError):
        asyncio.run(service.store_stream(upload, upload.content_type, upload.filename))

    assert upload.offset < 1_000_000


def test_stream_rejects_type_before_reading(upload_service, make_upload) -> None:
    upload = make_upload(b"hello", "text/plain", "notes.txt")

    with pytest.raises(UnsupportedTypeError):
        asyncio.run(
            upload_service.store_stream(upload, upload.content_type, upload.filename)
        )

    assert upload.offset == 0


def test_corrupt_bytes_are_invalid_image(upload_service, asset_storage) -> None:
    with pytest.raises(InvalidImageError):
        asyncio.run(upload_service.store(b"\x89PNG\r\n\x1a\ngarbage", "image/png", "x"))

    assert asset_storage.files == {}


def test_disallowed_real_format_is_invalid_image(upload_service, make_image) -> None:
    gif = make_image("GIF", mode="P", color=1)

    with pytest.raises(InvalidImageError):
        asyncio.run(upload_service.store(gif, "image/png", "sneaky.png"))


def test_pixel_bomb_is_invalid_image(asset_storage, make_image) -> None:
    service = UploadService(
        storage=asset_storage, max_bytes=1_000_000, max_dimension=64, max_pixels=100
    )

    with pytest.raises(InvalidImageError):
        asyncio.run(service.store(make_image("PNG", size=(20, 20)), "image/png", "b"))


def test_dimensions_are_capped(upload_service, asset_storage, make_image) -> None:
    data = make_image("PNG", size=(400, 200))

    stored = asyncio.run(upload_service.store(data, "image/png", "wide.png"))

    assert _open(asset_storage.files[stored.filename]).size == (64, 32)


def test_metadata_is_stripped(upload_service, asset_storage, make_image) -> None:
    exif = Image.Exif()
    exif[0x010E] = "private description"
    exif[0x013B] = "Artist Name"
    data = make_image("JPEG", exif=exif.tobytes())
    assert len(_open(data).getexif()) > 0

    stored = asyncio.run(upload_service.store(data, "image/jpeg", "photo.jpg"))

    assert len(_open(asset_storage.files[stored.filename]).getexif()) == 0


def test_transparency_is_flattened_onto_white(
    upload_service, asset_storage, make_image
) -> None:
    data = make_image("PNG", mode="RGBA", color=(0, 0, 0, 0))

    stored = asyncio.run(upload_service.store(data, "image/png", "clear.png"))

    image = _open(asset_storage.files[stored.filename]).convert("RGB")
    red, green, blue = image.getpixel((5, 5))
    assert min(red, green, blue) > 245


def test_client_filename_is_never_used(upload_service, asset_storage, make_image) -> None:
    stored = asyncio.run(
        upload_service.store(make_image(), "image/png", "../../etc/passwd.png")
    )

    assert "/" not in stored.filename
    assert "passwd" not in stored.filename
    assert ".." not in stored.url


def test_multi_picture_jpeg_is_stored_as_jpeg(
    upload_service, asset_storage, make_image
) -> None:
    second_frame = Image.new("RGB", (32, 24), (10, 120, 10))
    data = make_image("MPO", save_all=True, append_images=[second_frame])
    assert _open(data).format == "MPO"

    stored = asyncio.run(upload_service.store(data, "image/jpeg", "phone.jpg"))

    saved = _open(asset_storage.files[stored.filename])
    assert saved.format == "JPEG"
    assert saved.size == (32, 24)
