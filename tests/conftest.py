"""Shared test fixtures."""

import io
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from commission_desk.api.app import create_app
from commission_desk.config import Settings
from commission_desk.containers import AppContainer, build_container
from commission_desk.services.gallery import GalleryService
from commission_desk.services.store import CollectionStore, Record
from commission_desk.services.submissions import SubmissionService
from commission_desk.services.uploads import AssetStorage, UploadService

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse"


@dataclass
class InMemoryCollectionStore(CollectionStore):
    """In-memory collection store for tests."""

    collections: dict[str, list[Record]] = field(default_factory=dict)
    ticks: int = 0

    def read_collection(self, name: str) -> list[Record]:
        return [dict(record) for record in self.collections.get(name, [])]

    def write_collection(self, name: str, records: list[Record]) -> None:
        self.collections[name] = [dict(record) for record in records]

    def append_record(self, name: str, record: Record) -> Record:
        self.collections.setdefault(name, []).insert(0, dict(record))
        return record

    def update_record(
        self,
        name: str,
        record_id: str,
        patch: Mapping[str, object],
        validate: Callable[[Record], None] | None = None,
    ) -> Record | None:
        records = self.collections.get(name, [])
        for index, current in enumerate(records):
            if current.get("id") != record_id:
                continue
            if validate is not None:
                validate(current)
            self.ticks += 1
            updated = {**current, **patch, "updatedAt": f"tick-{self.ticks}"}
            records[index] = updated
            return dict(updated)
        return None


@dataclass
class InMemoryAssetStorage(AssetStorage):
    """Asset storage that keeps written files in a dict."""

    files: dict[str, bytes] = field(default_factory=dict)

    async def save(self, filename: str, data: bytes) -> None:
        self.files[filename] = data

    async def delete(self, filename: str) -> None:
        self.files.pop(filename, None)


@dataclass
class FakeUpload:
    """Stand-in for FastAPI's UploadFile."""

    data: bytes
    content_type: str | None = "image/png"
    filename: str | None = "ref.png"
    offset: int = 0

    async def read(self, size: int = -1) -> bytes:
        end = len(self.data) if size < 0 else self.offset + size
        chunk = self.data[self.offset : end]
        self.offset += len(chunk)
        return chunk


def _render_image(
    fmt: str = "PNG",
    size: tuple[int, int] = (32, 24),
    mode: str = "RGB",
    color: object = (200, 40, 90),
    **save_kwargs: object,
) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory producing encoded image bytes."""
    return _render_image


@pytest.fixture
def make_upload() -> Callable[..., FakeUpload]:
    return FakeUpload


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        token_secret="test-secret",
        data_dir=tmp_path / "data",
        upload_dir=tmp_path / "uploads",
        frontend_origin="*",
    )


@pytest.fixture
def memory_store() -> InMemoryCollectionStore:
    return InMemoryCollectionStore()


@pytest.fixture
def asset_storage() -> InMemoryAssetStorage:
    return InMemoryAssetStorage()


@pytest.fixture
def upload_service(asset_storage: InMemoryAssetStorage) -> UploadService:
    return UploadService(
        storage=asset_storage,
        max_bytes=1024 * 1024,
        max_dimension=64,
        max_pixels=1_000_000,
    )


@pytest.fixture
def submission_service(
    memory_store: InMemoryCollectionStore, upload_service: UploadService
) -> SubmissionService:
    return SubmissionService(memory_store, upload_service)


@pytest.fixture
def gallery_service(
    memory_store: InMemoryCollectionStore, upload_service: UploadService
) -> GalleryService:
    return GalleryService(memory_store, upload_service)


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def admin_headers(container: AppContainer) -> dict[str, str]:
    token = container.token_service.issue(ADMIN_EMAIL)
    return {"Authorization": f"Bearer {token}"}
