"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from finance_api.config import Settings, get_settings
from finance_api.database import get_engine
from finance_api.exceptions import FinanceAPIError
from finance_api.middleware.error_handler import (
    finance_api_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from finance_api.routers import backup
from finance_api.security.auth import IdentityProvider, RemoteIdentityProvider, StaticIdentityProvider

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Backups carry financial data and must never be cached
        response.headers["Cache-Control"] = "no-store, max-age=0"
        response.headers.setdefault("Vary", "Accept, Authorization, Origin")
        if not request.app.state.settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    yield
    # Only dispose an engine that was actually created
    if get_engine.cache_info().currsize:
        await get_engine().dispose()


def default_identity_provider(config: Settings) -> IdentityProvider:
    """Identity provider for the configured authentication service."""
    if config.auth_url:
        return RemoteIdentityProvider.from_settings(config)
    if config.environment == "production":
        raise ValueError("AUTH_URL must be set in production")
    logger.warning("AUTH_URL is not set, every request is anonymous")
    return StaticIdentityProvider(None)


def create_app(
    settings: Settings | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, defaults to the environment
        identity_provider: Resolves the current user of each request

    Returns:
        Configured application
    """
    config = settings or get_settings()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Finance API: backup export and import",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )
    app.state.settings = config
    app.state.identity_provider = identity_provider or default_identity_provider(config)

    app.add_exception_handler(FinanceAPIError, finance_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    allowed_origins = config.cors_origins_list
    if "*" in allowed_origins:
        raise ValueError(
            "CORS_ORIGINS cannot contain '*' wildcard when allow_credentials=True. "
            "Specify explicit origins."
        )

    # Middleware runs in reverse order of addition: CORS first on requests
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(backup.router, prefix="/api/v1/backup", tags=["Backup"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
