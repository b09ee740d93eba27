"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository, the booking workflow, the session middleware and
the reservation routes, then runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from bookings.controllers.reservation_controller import router as reservation_router
from bookings.repository.data_repository import SQLiteBookingRepository
from bookings.services.availability_service import AvailabilityService
from bookings.services.booking_service import BookingWorkflowService
from bookings.utils.config import Settings, get_settings
from bookings.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are injected via app.state; no request reaches another user's
    session because the only per-user state travels in the signed cookie.
    """
    settings = settings or get_settings()

    # --- Repository (bounded SQLite connection factory) ---
    repository = SQLiteBookingRepository(settings)

    # --- Services (business logic, no direct DB access) ---
    availability_service = AvailabilityService(repository)
    booking_service = BookingWorkflowService(
        repository=repository,
        availability_service=availability_service,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Session carrier (signed cookie, SameSite=Lax, Secure in production) ---
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.in_production,
    )

    # --- Routers ---
    app.include_router(reservation_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.availability_service = availability_service
    app.state.booking_service = booking_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before rooms are seeded; seeding is skipped once the
    rooms table has rows.
    """
    repository: SQLiteBookingRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    logger.info("Startup: seeding rooms (skipped if rooms table not empty)")
    repository.seed_rooms()

    logger.info("Startup complete, system ready")


# Module-level app object for uvicorn
app = create_app()
