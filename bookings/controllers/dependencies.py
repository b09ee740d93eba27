"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from bookings.services.booking_service import BookingWorkflowService
from bookings.services.session_service import ReservationSession
from bookings.utils.config import get_settings


def get_booking_service(request: Request) -> BookingWorkflowService:
    service = getattr(request.app.state, "booking_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = BookingWorkflowService(repository=repository, settings=get_settings())
            request.app.state.booking_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking service is not initialized",
        )
    return service


def get_reservation_session(request: Request) -> ReservationSession:
    """Scope session access to the caller's own cookie-backed session."""
    if "session" not in request.scope:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session middleware is not installed",
        )
    return ReservationSession(request.session)
