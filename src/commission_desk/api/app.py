"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from commission_desk.api.admin import router as admin_router
from commission_desk.api.auth import router as auth_router
from commission_desk.api.public import router as public_router
from commission_desk.app_logging import configure_logging
from commission_desk.config import parse_allowed_origins
from commission_desk.containers import AppContainer
from commission_desk.domain.errors import DeskError, StoreError

# Routes are served both bare and under /api; older frontends use either.
ROUTE_PREFIXES = ("", "/api")


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Commission Desk")
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.frontend_origin),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for prefix in ROUTE_PREFIXES:
        in_schema = prefix == ""
        app.include_router(public_router, prefix=prefix, include_in_schema=in_schema)
        app.include_router(auth_router, prefix=prefix, include_in_schema=in_schema)
        app.include_router(admin_router, prefix=prefix, include_in_schema=in_schema)

    app.mount(
        "/uploads",
        StaticFiles(directory=container.settings.upload_dir),
        name="uploads",
    )

    @app.exception_handler(DeskError)
    async def desk_error_handler(request: Request, exc: DeskError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "Request failed on storage",
                exc_info=exc,
                extra={"path": request.url.path},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": _describe_validation(exc)},
        )

    return app


def _describe_validation(exc: RequestValidationError) -> str:
    """Flatten FastAPI validation errors into one readable message."""
    messages = []
    for error in exc.errors():
        parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        location = ".".join(parts)
        message = error.get("msg", "invalid")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"
