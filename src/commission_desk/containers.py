"""Dependency container wiring for the application."""

from dataclasses import dataclass

from commission_desk.adapters.json_file_store import JsonFileCollectionStore
from commission_desk.adapters.local_asset_storage import LocalAssetStorage
from commission_desk.config import Settings
from commission_desk.services.gallery import GalleryService
from commission_desk.services.store import CollectionStore
from commission_desk.services.submissions import SubmissionService
from commission_desk.services.tokens import TokenService
from commission_desk.services.uploads import UploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: CollectionStore
    token_service: TokenService
    upload_service: UploadService
    gallery_service: GalleryService
    submission_service: SubmissionService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Creates the data and upload directories; an OSError here means the
    process cannot serve requests and is left to propagate.
    """
    resolved_settings = settings or Settings()
    store = JsonFileCollectionStore(resolved_settings.data_dir)
    store.ensure_ready()
    asset_storage = LocalAssetStorage(resolved_settings.upload_dir)
    asset_storage.ensure_ready()
    token_service = TokenService(
        secret=resolved_settings.token_secret,
        admin_email=resolved_settings.admin_email,
        admin_password=resolved_settings.admin_password,
        ttl_seconds=resolved_settings.token_ttl_seconds,
    )
    upload_service = UploadService(
        storage=asset_storage,
        max_bytes=resolved_settings.max_upload_bytes,
        max_dimension=resolved_settings.max_image_dimension,
        max_pixels=resolved_settings.max_image_pixels,
    )
    return AppContainer(
        settings=resolved_settings,
        store=store,
        token_service=token_service,
        upload_service=upload_service,
        gallery_service=GalleryService(store, upload_service),
        submission_service=SubmissionService(store, upload_service),
    )
