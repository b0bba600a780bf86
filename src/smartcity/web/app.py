"""FastAPI application for the smart-city complaint service.

Wires the complaint lifecycle engine, its collaborators and the HTTP
routers onto a single app instance.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smartcity.auth.middleware import AuthMiddleware
from smartcity.auth.provider import MockAuthProvider
from smartcity.complaints.lifecycle import ComplaintLifecycleEngine
from smartcity.complaints.service import ComplaintService
from smartcity.complaints.store import ComplaintStore
from smartcity.core.config import Settings
from smartcity.core.errors import (
    ComplaintError,
    Forbidden,
    NotFound,
    Unauthenticated,
    ValidationFailed,
)
from smartcity.core.types import HealthStatus
from smartcity.directory.service import DirectoryService
from smartcity.directory.store import DirectoryStore
from smartcity.geography.lookup import GeographyLookup
from smartcity.governance.audit import AuditLogger
from smartcity.notifications.engine import NotificationEngine
from smartcity.notifications.models import NotificationChannel
from smartcity.notifications.service import MockNotificationService
from smartcity.notifications.store import NotificationStore
from smartcity.web.auth_router import router as auth_router
from smartcity.web.complaint_router import router as complaint_router
from smartcity.web.directory_router import router as directory_router
from smartcity.web.notification_router import router as notification_router
from smartcity.web.user_router import router as user_router

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]

_STATUS_BY_ERROR: list[tuple[type[ComplaintError], int]] = [
    (Unauthenticated, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (ValidationFailed, 400),
]


def _config_path(path: str) -> Path:
    """Resolve a config-relative path against the project root when needed."""
    candidate = Path(path)
    if candidate.is_absolute() or candidate.exists():
        return candidate
    return _PROJECT_ROOT / candidate


def status_for(exc: ComplaintError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release the database pool, if one was opened, when the app shuts down."""
    yield
    db_manager = getattr(app.state, "db_manager", None)
    if db_manager is not None:
        await db_manager.close()
        logger.info("Closed database connections")


# --- Application factory ---


def create_app(
    settings: Settings | None = None,
    audit_logger: AuditLogger | None = None,
    directory: Any | None = None,
    geography: GeographyLookup | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with their own directory, geography table and audit log.

    Args:
        settings: Application settings. Defaults to Settings().
        audit_logger: Optional pre-built AuditLogger.
        directory: Optional pre-built user/department directory. Defaults to
            the seeded in-memory directory, or the Postgres repository when
            a database URL is configured.
        geography: Optional pre-built geography lookup.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("smartcity").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Smart City Complaints",
        description="Municipal complaint lifecycle and authorization service",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if audit_logger is None:
        audit_logger = AuditLogger(config=settings.audit)

    if geography is None:
        geography = GeographyLookup(_config_path(settings.geography.data_path))

    # Storage: Postgres when a database URL is configured, in-memory otherwise
    if settings.db.database_url:
        from smartcity.db.engine import DatabaseManager
        from smartcity.repositories.postgres.complaints import PostgresComplaintRepository
        from smartcity.repositories.postgres.directory import PostgresDirectoryRepository
        from smartcity.repositories.postgres.notifications import PostgresNotificationRepository

        db_manager = DatabaseManager.from_config(settings.db)
        app.state.db_manager = db_manager
        complaint_store: Any = PostgresComplaintRepository(db_manager)
        notification_store: Any = PostgresNotificationRepository(db_manager)
        if directory is None:
            directory = PostgresDirectoryRepository(db_manager)

        logger.info("Using Postgres storage")
    else:
        complaint_store = ComplaintStore()
        notification_store = NotificationStore()
        if directory is None:
            directory = DirectoryStore(
                seed_path=_config_path(settings.directory.seed_path),
                load_seed=True,
            )

    notification_service = MockNotificationService(store=notification_store)
    notification_engine = NotificationEngine(
        service=notification_service,
        templates_path=_config_path(settings.notification.templates_path),
        default_channel=NotificationChannel(settings.notification.default_channel),
    )

    lifecycle_engine = ComplaintLifecycleEngine(
        store=complaint_store,
        directory=directory,
        notifier=notification_engine,
        audit_logger=audit_logger,
        config=settings.complaints,
    )
    complaint_service = ComplaintService(
        store=complaint_store,
        directory=directory,
        engine=lifecycle_engine,
        geography=geography,
        notifier=notification_engine,
        audit_logger=audit_logger,
        config=settings.complaints,
        admin_recipient=settings.notification.admin_recipient,
    )

    directory_service = DirectoryService(
        directory=directory,
        geography=geography,
        audit_logger=audit_logger,
    )

    auth_provider = MockAuthProvider(
        directory=directory,
        fixtures_path=_config_path(settings.auth.fixtures_path),
        token_expiry_minutes=settings.auth.token_expiry_minutes,
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.audit_logger = audit_logger
    app.state.geography = geography
    app.state.directory = directory
    app.state.complaint_store = complaint_store
    app.state.notification_store = notification_store
    app.state.notification_service = notification_service
    app.state.notification_engine = notification_engine
    app.state.lifecycle_engine = lifecycle_engine
    app.state.complaint_service = complaint_service
    app.state.directory_service = directory_service
    app.state.auth_provider = auth_provider

    app.add_middleware(AuthMiddleware)

    app.include_router(auth_router)
    app.include_router(complaint_router)
    app.include_router(directory_router)
    app.include_router(notification_router)
    app.include_router(user_router)

    @app.exception_handler(ComplaintError)
    async def complaint_error_handler(request: Request, exc: ComplaintError) -> JSONResponse:
        status_code = status_for(exc)
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
            headers=headers,
        )

    @app.get("/health", response_model=HealthStatus)
    async def health_check() -> HealthStatus:
        """Health check endpoint."""
        return HealthStatus(
            service="smartcity-complaints",
            healthy=True,
            details={
                "storage": "postgres" if settings.db.database_url else "memory",
                "environment": settings.environment,
            },
        )

    return app
