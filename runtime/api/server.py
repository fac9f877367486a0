"""
FastAPI application entry point for the interview runtime.

Responsibilities:
- create the FastAPI app
- construct the shared objects (SessionStore, token + notification clients,
  InterviewCoordinator) and attach the coordinator to app.state
- render InterviewError subclasses into the failure envelope
- include session routes under /api/session and webhook routes under
  /api/webhook
- cancel pending retention timers on shutdown
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from configs.settings import Settings, settings
from core.api.avatar_client import AvatarTokenClient
from core.api.notification_client import NotificationClient
from exceptions.exceptions import ErrorKind, InterviewError

from ..agents.interview_coordinator import InterviewCoordinator
from ..models.api_models import ErrorResponse
from ..store.session_store import SessionStore
from . import session_routes, webhook_routes


logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SESSION_CLOSED: 409,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.INTERNAL: 500,
}


def build_coordinator(config: Settings = settings) -> InterviewCoordinator:
    """Wire the coordinator and its collaborators from settings."""
    return InterviewCoordinator(
        session_store=SessionStore(),
        token_client=AvatarTokenClient(
            api_key=config.avatar_api_key,
            base_url=config.avatar_api_url,
            timeout=config.http_timeout,
        ),
        notification_client=NotificationClient(
            started_url=config.started_webhook_url,
            ended_url=config.ended_webhook_url,
            timeout=config.http_timeout,
        ),
        retention_seconds=config.retention_seconds,
    )


def _error_response(kind: ErrorKind, detail: str) -> JSONResponse:
    body = ErrorResponse(error=kind, detail=detail)
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content=body.model_dump(by_alias=True, mode="json"),
    )


async def handle_interview_error(request: Request, exc: InterviewError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        logger.error("[API] %s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.detail)
    else:
        logger.warning("[API] %s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.detail)
    return _error_response(exc.kind, exc.detail)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    detail = "; ".join(problems) or "Invalid request"
    logger.warning("[API] %s %s -> InvalidInput: %s", request.method, request.url.path, detail)
    return _error_response(ErrorKind.INVALID_INPUT, detail)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[API] Unexpected error on %s %s", request.method, request.url.path)
    return _error_response(ErrorKind.INTERNAL, f"{type(exc).__name__}: {exc}")


def create_app(coordinator: Optional[InterviewCoordinator] = None) -> FastAPI:
    """Build the FastAPI app around `coordinator` (built from settings if None)."""
    coordinator = coordinator or build_coordinator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await coordinator.shutdown()

    app = FastAPI(title="Interview Avatar Runtime", lifespan=lifespan)
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InterviewError, handle_interview_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(session_routes.router, prefix="/api/session")
    app.include_router(webhook_routes.router, prefix="/api/webhook")

    # --------------------------------------------------------
    # Endpoint: GET /healthz
    # --------------------------------------------------------
    @app.get("/healthz")
    def health_check():
        """
        Simple health check endpoint for uptime monitoring.
        """
        return {"status": "ok", "sessions": len(coordinator.session_store)}

    return app


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
