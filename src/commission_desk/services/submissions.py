"""Commission requests and enquiries: public intake and admin triage."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from commission_desk.domain.errors import NotFoundError, ValidationError
from commission_desk.domain.records import (
    COMMISSIONS,
    ENQUIRIES,
    CommissionRequest,
    Enquiry,
    new_record_id,
    utc_timestamp,
)
from commission_desk.domain.status import (
    COMMISSION_STATUSES,
    ENQUIRY_STATUSES,
    SubmissionStatus,
    coerce_stored_status,
    ensure_transition,
    normalize_status,
)
from commission_desk.services.store import CollectionStore, Record
from commission_desk.services.uploads import StoredUpload, UploadService

logger = logging.getLogger(__name__)

MAX_REFS = 3

_ALLOWED_STATUSES = {
    COMMISSIONS: COMMISSION_STATUSES,
    ENQUIRIES: ENQUIRY_STATUSES,
}


class IncomingFile(Protocol):
    """Uploaded file part as exposed by FastAPI's ``UploadFile``."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes."""


@dataclass
class SubmissionService:
    """Creates submissions and applies admin status/notes changes."""

    store: CollectionStore
    upload_service: UploadService

    async def submit_commission(  # noqa: PLR0913
        self,
        name: str | None,
        email: str | None,
        brief: str | None,
        type_: str | None = None,
        size: str | None = None,
        files: Sequence[IncomingFile] = (),
    ) -> Record:
        """Validate and persist a commission request with up to three refs."""
        name, email, brief = _require(name=name, email=email, brief=brief)
        if len(files) > MAX_REFS:
            raise ValidationError(f"At most {MAX_REFS} reference images allowed")
        for upload in files:
            self.upload_service.check_type(upload.content_type, upload.filename)
        stored: list[StoredUpload] = []
        try:
            for upload in files:
                stored.append(
                    await self.upload_service.store_stream(
                        upload, upload.content_type, upload.filename
                    )
                )
            request = CommissionRequest(
                id=new_record_id("c"),
                name=name,
                email=email,
                brief=brief,
                type=(type_ or "").strip() or "custom",
                size=(size or "").strip() or "digital",
                refs=[upload.url for upload in stored],
                created_at=utc_timestamp(),
            )
            record = self.store.append_record(COMMISSIONS, request.to_record())
        except Exception:
            # Files without a saved record are unreachable from the admin portal.
            await self.upload_service.discard(stored)
            raise
        logger.info(
            "Commission submitted",
            extra={"commission_id": request.id, "refs": len(stored)},
        )
        return record

    def submit_enquiry(
        self, name: str | None, email: str | None, message: str | None
    ) -> Record:
        """Validate and persist an enquiry."""
        name, email, message = _require(name=name, email=email, message=message)
        enquiry = Enquiry(
            id=new_record_id("e"),
            name=name,
            email=email,
            message=message,
            created_at=utc_timestamp(),
        )
        record = self.store.append_record(ENQUIRIES, enquiry.to_record())
        logger.info("Enquiry submitted", extra={"enquiry_id": enquiry.id})
        return record

    def list_commissions(self) -> list[Record]:
        """Return commission requests, newest first."""
        return self.store.read_collection(COMMISSIONS)

    def list_enquiries(self) -> list[Record]:
        """Return enquiries, newest first."""
        return self.store.read_collection(ENQUIRIES)

    def patch_submission(
        self,
        collection: str,
        record_id: str,
        status: str | None = None,
        notes: str | None = None,
    ) -> Record:
        """Apply an admin status and/or notes change."""
        allowed = _ALLOWED_STATUSES.get(collection)
        if allowed is None:
            raise ValueError(f"Not a submission collection: {collection}")
        if status is None and notes is None:
            raise ValidationError("status or notes required")
        patch: dict[str, object] = {}
        target: SubmissionStatus | None = None
        if status is not None:
            target = normalize_status(status, allowed)
            patch["status"] = str(target)
        if notes is not None:
            patch["notes"] = notes

        def check_transition(current: Record) -> None:
            if target is not None:
                ensure_transition(coerce_stored_status(current.get("status")), target)

        updated = self.store.update_record(
            collection, record_id, patch, validate=check_transition
        )
        if updated is None:
            raise NotFoundError("Not found")
        logger.info(
            "Submission updated",
            extra={"collection": collection, "record_id": record_id, **patch},
        )
        return updated


def _require(**fields: str | None) -> tuple[str, ...]:
    """Trim required text fields, raising if any is blank."""
    values = tuple((value or "").strip() for value in fields.values())
    if not all(values):
        raise ValidationError(f"{', '.join(fields)} required")
    return values
