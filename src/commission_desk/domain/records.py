"""Domain records persisted in the JSON collections."""

import secrets
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from commission_desk.domain.status import SubmissionStatus

GALLERY = "gallery"
COMMISSIONS = "commissions"
ENQUIRIES = "enquiries"
COLLECTIONS = (GALLERY, COMMISSIONS, ENQUIRIES)


def new_record_id(prefix: str) -> str:
    """Return a collision-resistant id such as ``c_1718000000000_a1b2c3``."""
    return f"{prefix}_{time.time_ns() // 1_000_000}_{secrets.token_hex(3)}"


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    value = moment or datetime.now(tz=UTC)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class GalleryItem:
    """Published gallery image."""

    id: str
    title: str
    category: str
    url: str
    thumb_url: str
    created_at: str

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "url": self.url,
            "thumbUrl": self.thumb_url,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class CommissionRequest:
    """Public commission request awaiting admin triage."""

    id: str
    name: str
    email: str
    brief: str
    type: str
    size: str
    created_at: str
    refs: list[str] = field(default_factory=list)
    status: SubmissionStatus = SubmissionStatus.NEW
    notes: str = ""

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "brief": self.brief,
            "type": self.type,
            "size": self.size,
            "refs": list(self.refs),
            "status": str(self.status),
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.created_at,
        }


@dataclass(frozen=True)
class Enquiry:
    """Public enquiry (direct sale question)."""

    id: str
    name: str
    email: str
    message: str
    created_at: str
    status: SubmissionStatus = SubmissionStatus.NEW
    notes: str = ""

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "refs": [],
            "status": str(self.status),
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.created_at,
        }


@dataclass(frozen=True)
class AdminSession:
    """Identity carried by a verified admin token."""

    email: str
    role: str
    issued_at: int
    expires_at: int
