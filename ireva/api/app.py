"""iREVA authorization service: FastAPI application factory.

The app owns one :class:`~ireva.authorization.Authorizer`, built from
:class:`~ireva.config.Settings` when the app is created, so a missing signing
secret stops the process before it serves a request.

Run with ``python -m ireva`` or ``uvicorn --factory ireva.api.app:create_app``.
"""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import ireva
from ireva.api.routes.auth import router as auth_router
from ireva.api.routes.auth import scoped_router
from ireva.authorization import Authorizer
from ireva.config import Settings, get_settings
from ireva.exceptions import IrevaError
from ireva.logging_config import log_startup_info, setup_logging

logger = logging.getLogger("ireva.api")


def create_app(settings: Settings | None = None, *, configure_logging: bool = True) -> FastAPI:
    """Build the application.

    Raises:
        pydantic.ValidationError: settings are missing (no ``IREVA_JWT_SECRET``)
            or invalid.
    """
    if settings is None:
        settings = get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="iREVA Authorization",
        version=ireva.__version__,
        description="JWT authentication with role, tenant and investor gating.",
    )
    app.state.settings = settings
    app.state.authorizer = Authorizer.from_settings(settings)
    started_at = time.monotonic()

    @app.exception_handler(IrevaError)
    async def ireva_error_handler(request: Request, exc: IrevaError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        if exc.status_code >= 500:
            logger.error("%s: %s [%s]", exc.error_type, exc.message, request_id)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_type,
                "message": exc.message,
                "request_id": request_id,
            },
            headers=headers,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response

    # Registered last so it runs first and request_id is set for handlers.
    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next) -> Response:
        request_id = str(uuid4())[:8]
        request.state.request_id = request_id
        start = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)
        logger.info(
            "%s %s %s %.1fms [%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health", tags=["Health"], summary="Health check")
    async def health():
        return {
            "status": "ok",
            "version": ireva.__version__,
            "uptime_seconds": round(time.monotonic() - started_at, 1),
        }

    app.include_router(auth_router)
    app.include_router(scoped_router)

    log_startup_info(settings.jwt_algorithm, settings.clock_skew_seconds)
    return app
