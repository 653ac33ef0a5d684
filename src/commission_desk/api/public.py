"""Public endpoints plus the admin gallery upload."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from commission_desk.api.auth import get_container, require_admin
from commission_desk.api.schemas import EnquiryRequest  # noqa: TC001
from commission_desk.domain.errors import ValidationError

if TYPE_CHECKING:
    from commission_desk.containers import AppContainer

router = APIRouter(tags=["public"])


@router.get("/")
async def root() -> dict[str, object]:
    """Identify the service."""
    return {"ok": True, "service": "commission-desk"}


@router.get("/health")
async def health() -> dict[str, bool]:
    """Simple health check endpoint."""
    return {"ok": True}


@router.get("/gallery")
async def list_gallery(request: Request) -> dict[str, object]:
    """Return published gallery items, newest first."""
    container: AppContainer = get_container(request)
    return {"ok": True, "items": container.gallery_service.list_items()}


@router.post("/upload", dependencies=[Depends(require_admin)])
async def upload_gallery_item(
    request: Request,
    file: UploadFile | None = File(default=None),
    title: str = Form(default=""),
    category: str = Form(default=""),
) -> dict[str, object]:
    """Publish an image to the gallery."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    container: AppContainer = get_container(request)
    item = await container.gallery_service.publish(
        title=title,
        category=category,
        file=file,
        content_type=file.content_type,
        filename=file.filename,
    )
    return {"ok": True, "item": item}


@router.post("/commissions")
async def submit_commission(  # noqa: PLR0913
    request: Request,
    name: str = Form(default=""),
    email: str = Form(default=""),
    brief: str = Form(default=""),
    type: str = Form(default=""),  # noqa: A002
    size: str = Form(default=""),
    refs: list[UploadFile] | None = File(default=None),
) -> dict[str, object]:
    """Accept a commission request with up to three reference images."""
    container: AppContainer = get_container(request)
    files = [ref for ref in refs or [] if ref.filename]
    commission = await container.submission_service.submit_commission(
        name=name,
        email=email,
        brief=brief,
        type_=type,
        size=size,
        files=files,
    )
    return {"ok": True, "commission": commission}


@router.post("/enquiries")
async def submit_enquiry(payload: EnquiryRequest, request: Request) -> dict[str, bool]:
    """Accept a contact-form enquiry."""
    container: AppContainer = get_container(request)
    container.submission_service.submit_enquiry(
        payload.name, payload.email, payload.message
    )
    return {"ok": True}
