"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
the DomainError handler, lifespan events that build the services onto
app.state, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.atrium.api.errors import register_exception_handlers
from src.atrium.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.atrium.api.v1.router import router as v1_router
from src.atrium.config import Environment, get_settings
from src.atrium.core.database import close_db, get_session_factory, init_db
from src.atrium.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.atrium.meetings.service import MeetingService
from src.atrium.resources.service import ResourceService
from src.atrium.spaces.service import SpaceService
from src.atrium.workspaces.repository import WorkspaceDirectory


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build services on startup, dispose the engine on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    # Production schemas come from Alembic migrations
    if settings.ENVIRONMENT == Environment.development:
        await init_db()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    session_factory = get_session_factory()
    resource_service = ResourceService(session_factory)
    app.state.workspace_directory = WorkspaceDirectory(session_factory)
    app.state.resource_service = resource_service
    app.state.meeting_service = MeetingService(
        session_factory,
        resource_service,
        default_title=settings.DEFAULT_MEETING_TITLE,
    )
    app.state.space_service = SpaceService(session_factory, resource_service)
    log.info("app.services_initialized", environment=settings.ENVIRONMENT.value)

    yield

    await close_db()
    log.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Atrium API",
        version="0.1.0",
        description="Workspace resource hierarchy: spaces, meetings and publication",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Middleware is added in reverse order (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins() or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
