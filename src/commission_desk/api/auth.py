"""Admin login and bearer-token guard."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request

from commission_desk.api.schemas import LoginRequest
from commission_desk.domain.errors import InvalidTokenError
from commission_desk.domain.records import AdminSession  # noqa: TC001

if TYPE_CHECKING:
    from commission_desk.containers import AppContainer

router = APIRouter(tags=["auth"])


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_admin(
    request: Request,
    authorization: str | None = Header(default=None),
) -> AdminSession:
    """Resolve the admin session from an ``Authorization: Bearer`` header."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidTokenError()
    container = get_container(request)
    return container.token_service.require_session(token.strip())


@router.post("/auth/login")
async def login(payload: LoginRequest, request: Request) -> dict[str, object]:
    """Exchange admin credentials for a bearer token."""
    container = get_container(request)
    token = container.token_service.login(payload.email, payload.password)
    return {"ok": True, "token": token, "email": container.settings.admin_email}


@router.get("/auth/me")
@router.get("/me", include_in_schema=False)
async def me(session: AdminSession = Depends(require_admin)) -> dict[str, object]:
    """Describe the session behind the presented token."""
    return {"ok": True, "email": session.email, "role": session.role}
