"""Admin triage endpoints for commissions and enquiries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request

from commission_desk.api.auth import get_container, require_admin
from commission_desk.api.schemas import SubmissionPatch  # noqa: TC001
from commission_desk.domain.records import COMMISSIONS, ENQUIRIES

if TYPE_CHECKING:
    from commission_desk.containers import AppContainer

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.get("/commissions")
async def list_commissions(request: Request) -> dict[str, object]:
    """Return every commission request, newest first."""
    container: AppContainer = get_container(request)
    return {"ok": True, "items": container.submission_service.list_commissions()}


@router.patch("/commissions/{record_id}")
async def patch_commission(
    record_id: str, payload: SubmissionPatch, request: Request
) -> dict[str, object]:
    """Update status and/or notes on a commission request."""
    container: AppContainer = get_container(request)
    item = container.submission_service.patch_submission(
        COMMISSIONS, record_id, status=payload.status, notes=payload.notes
    )
    return {"ok": True, "item": item}


@router.get("/enquiries")
async def list_enquiries(request: Request) -> dict[str, object]:
    """Return every enquiry, newest first."""
    container: AppContainer = get_container(request)
    return {"ok": True, "items": container.submission_service.list_enquiries()}


@router.patch("/enquiries/{record_id}")
async def patch_enquiry(
    record_id: str, payload: SubmissionPatch, request: Request
) -> dict[str, object]:
    """Update status and/or notes on an enquiry."""
    container: AppContainer = get_container(request)
    item = container.submission_service.patch_submission(
        ENQUIRIES, record_id, status=payload.status, notes=payload.notes
    )
    return {"ok": True, "item": item}
