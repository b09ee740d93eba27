"""HTTP controller layer for the guest reservation workflow."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from bookings.controllers.dependencies import get_booking_service, get_reservation_session
from bookings.domain.models import Reservation, Room
from bookings.repository.base import RestrictionConflictError, RoomNotFoundError, StorageError
from bookings.services.booking_service import BookingWorkflowService, MalformedRequestError
from bookings.services.session_service import (
    FLASH_KEY,
    ReservationSession,
    SessionMissingError,
)
from bookings.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["reservations"])

SEARCH_PATH = "/search-availability"
MAKE_RESERVATION_PATH = "/make-reservation"
SUMMARY_PATH = "/reservation-summary"


class RoomResponse(BaseModel):
    room_id: int = Field(gt=0)
    room_name: str


class ReservationResponse(BaseModel):
    reservation_id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    start_date: date
    end_date: date
    room_id: Optional[int] = None
    room: Optional[RoomResponse] = None


class SearchFormResponse(BaseModel):
    error: Optional[str] = None
    flash: Optional[str] = None


class ChooseRoomResponse(BaseModel):
    start_date: date
    end_date: date
    rooms: list[RoomResponse]


class AvailabilityJSONResponse(BaseModel):
    ok: bool
    message: str
    room_id: str
    start_date: str
    end_date: str


class ReservationFormResponse(BaseModel):
    reservation: ReservationResponse
    start_date: str
    end_date: str
    errors: dict[str, list[str]] = Field(default_factory=dict)
    # First message per field, as shown beside each input.
    field_errors: dict[str, str] = Field(default_factory=dict)


class ReservationSummaryResponse(BaseModel):
    reservation: ReservationResponse
    flash: Optional[str] = None


def _room_response(room: Room) -> RoomResponse:
    return RoomResponse(room_id=room.room_id, room_name=room.room_name)


def _reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        first_name=reservation.first_name,
        last_name=reservation.last_name,
        phone=reservation.phone,
        email=reservation.email,
        start_date=reservation.start_date,
        end_date=reservation.end_date,
        room_id=reservation.room_id,
        room=_room_response(reservation.room) if reservation.room is not None else None,
    )


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)


def _restart_workflow(session: ReservationSession, exc: SessionMissingError) -> RedirectResponse:
    logger.warning("Session reservation unavailable (%s): %s", exc.reason, exc)
    session.flash(str(exc))
    return _redirect(SEARCH_PATH)


@router.get(SEARCH_PATH, response_model=SearchFormResponse)
def availability(
    session: ReservationSession = Depends(get_reservation_session),
) -> SearchFormResponse:
    return SearchFormResponse(
        error=session.pop_flash(),
        flash=session.pop_flash(FLASH_KEY),
    )


@router.post(SEARCH_PATH, response_model=ChooseRoomResponse)
def post_availability(
    start: str = Form(default=""),
    end: str = Form(default=""),
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> ChooseRoomResponse | RedirectResponse:
    try:
        outcome = service.search_availability(session, start, end)
    except MalformedRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        logger.exception("Storage failure during availability search")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected availability search failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc

    if not outcome.available or outcome.reservation is None:
        return _redirect(SEARCH_PATH)
    return ChooseRoomResponse(
        start_date=outcome.reservation.start_date,
        end_date=outcome.reservation.end_date,
        rooms=[_room_response(room) for room in outcome.rooms],
    )


@router.get("/search-availability-json", response_model=AvailabilityJSONResponse)
def availability_json(
    start: Optional[str] = Query(default=None),
    end: Optional[str] = Query(default=None),
    room_id: Optional[str] = Query(default=None),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> AvailabilityJSONResponse:
    try:
        result = service.check_room_availability(start, end, room_id)
    except StorageError as exc:
        logger.exception("Storage failure during room availability check")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected room availability failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    return AvailabilityJSONResponse(**result.to_dict())


@router.get("/choose-room/{room_id}", response_model=None)
def choose_room(
    room_id: str,
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> RedirectResponse:
    try:
        service.choose_room(session, room_id)
    except SessionMissingError as exc:
        return _restart_workflow(session, exc)
    except MalformedRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        logger.exception("Storage failure while choosing room")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected choose room failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    return _redirect(MAKE_RESERVATION_PATH)


@router.get("/book-room", response_model=None)
def book_room(
    room_id: Optional[str] = Query(default=None, alias="id"),
    s: Optional[str] = Query(default=None),
    e: Optional[str] = Query(default=None),
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> RedirectResponse:
    try:
        service.book_room(session, room_id, s, e)
    except MalformedRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        logger.exception("Storage failure while booking room")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected book room failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    return _redirect(MAKE_RESERVATION_PATH)


@router.get(MAKE_RESERVATION_PATH, response_model=ReservationFormResponse)
def reservation(
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> ReservationFormResponse | RedirectResponse:
    try:
        draft = service.reservation_form(session)
    except SessionMissingError as exc:
        return _restart_workflow(session, exc)
    return ReservationFormResponse(
        reservation=_reservation_response(draft),
        start_date=draft.start_date.isoformat(),
        end_date=draft.end_date.isoformat(),
    )


@router.post(
    MAKE_RESERVATION_PATH,
    response_model=None,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ReservationFormResponse}},
)
def post_reservation(
    first_name: str = Form(default=""),
    last_name: str = Form(default=""),
    phone: str = Form(default=""),
    email: str = Form(default=""),
    start_date: str = Form(default=""),
    end_date: str = Form(default=""),
    room_id: str = Form(default=""),
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> JSONResponse | RedirectResponse:
    form_data = {
        "first_name": first_name,
        "last_name": last_name,
        "phone": phone,
        "email": email,
        "start_date": start_date,
        "end_date": end_date,
        "room_id": room_id,
    }
    try:
        submission = service.make_reservation(session, form_data)
    except MalformedRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except RestrictionConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        logger.exception("Storage failure during reservation commit")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reservation commit failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        ) from exc

    if not submission.committed:
        payload = ReservationFormResponse(
            reservation=_reservation_response(submission.reservation),
            start_date=start_date,
            end_date=end_date,
            errors=submission.form.errors.as_dict(),
            field_errors={
                field: submission.form.errors.get(field) or ""
                for field in submission.form.errors
            },
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=payload.model_dump(mode="json"),
        )
    return _redirect(SUMMARY_PATH)


@router.get(SUMMARY_PATH, response_model=ReservationSummaryResponse)
def reservation_summary(
    session: ReservationSession = Depends(get_reservation_session),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> ReservationSummaryResponse | RedirectResponse:
    try:
        committed = service.reservation_summary(session)
    except SessionMissingError as exc:
        return _restart_workflow(session, exc)
    return ReservationSummaryResponse(
        reservation=_reservation_response(committed),
        flash=session.pop_flash(FLASH_KEY),
    )
