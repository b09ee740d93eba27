"""Multi-step reservation workflow: search, choose room, enter details, commit."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Mapping, Optional

from bookings.domain.forms import Form, FormValue
from bookings.domain.models import Reservation, Room
from bookings.repository.base import BookingRepository
from bookings.services.availability_service import AvailabilityService, InvalidDateRangeError
from bookings.services.session_service import FLASH_KEY, ReservationSession, SessionMissingError
from bookings.utils.config import Settings, get_settings
from bookings.utils.logger import get_logger


logger = get_logger(__name__)

NO_AVAILABILITY_MESSAGE = "No Availability"
RESERVATION_SAVED_MESSAGE = "Reservation saved"


class BookingError(Exception):
    """Base exception for reservation workflow failures."""


class MalformedRequestError(BookingError):
    """Raised when a date or room id in the request cannot be parsed."""


@dataclass(frozen=True)
class SearchOutcome:
    rooms: list[Room]
    reservation: Optional[Reservation] = None

    @property
    def available(self) -> bool:
        return bool(self.rooms)


@dataclass(frozen=True)
class ReservationSubmission:
    """Result of posting guest details; `committed` is False when the form is invalid."""

    reservation: Reservation
    form: Form
    committed: bool = False


@dataclass(frozen=True)
class RoomAvailabilityCheck:
    ok: bool
    message: str
    room_id: str
    start_date: str
    end_date: str

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "message": self.message,
            "room_id": self.room_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
        }


class BookingWorkflowService:
    """Coordinates search -> choose room -> details -> commit -> summary.

    The in-flight reservation lives only in the caller's session, passed into
    every step as a `ReservationSession`.
    """

    def __init__(
        self,
        repository: BookingRepository,
        availability_service: Optional[AvailabilityService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository
        self._availability = availability_service or AvailabilityService(repository)

    def parse_date(self, raw_value: Optional[str], field_name: str) -> date:
        raw_value = raw_value or ""
        try:
            parsed = datetime.strptime(raw_value, self._settings.date_format).date()
        except ValueError as exc:
            raise MalformedRequestError(
                f"{field_name} must follow YYYY-MM-DD format"
            ) from exc
        # strptime tolerates unpadded fields such as 2024-6-1.
        if parsed.strftime(self._settings.date_format) != raw_value:
            raise MalformedRequestError(f"{field_name} must follow YYYY-MM-DD format")
        return parsed

    def parse_room_id(self, raw_value: Optional[str], field_name: str = "room_id") -> int:
        try:
            room_id = int(raw_value or "")
        except ValueError as exc:
            raise MalformedRequestError(f"{field_name} must be an integer") from exc
        if room_id <= 0:
            raise MalformedRequestError(f"{field_name} must be a positive integer")
        return room_id

    def parse_date_range(
        self,
        raw_start: Optional[str],
        raw_end: Optional[str],
        start_field: str = "start",
        end_field: str = "end",
    ) -> tuple[date, date]:
        start_date = self.parse_date(raw_start, start_field)
        end_date = self.parse_date(raw_end, end_field)
        if end_date < start_date:
            raise MalformedRequestError(f"{end_field} must not be before {start_field}")
        return start_date, end_date

    def search_availability(
        self,
        session: ReservationSession,
        raw_start: Optional[str],
        raw_end: Optional[str],
    ) -> SearchOutcome:
        start_date, end_date = self.parse_date_range(raw_start, raw_end)
        rooms = self._availability.search_availability_for_all_rooms(start_date, end_date)
        if not rooms:
            session.remove_reservation()
            session.flash(NO_AVAILABILITY_MESSAGE)
            return SearchOutcome(rooms=[])

        draft = Reservation(start_date=start_date, end_date=end_date)
        session.store_reservation(draft)
        return SearchOutcome(rooms=rooms, reservation=draft)

    def choose_room(self, session: ReservationSession, raw_room_id: Optional[str]) -> Reservation:
        room_id = self.parse_room_id(raw_room_id, "id")
        draft = session.load_reservation()
        room = self._repository.get_room_by_id(room_id)
        draft = replace(draft, room_id=room.room_id, room=room)
        session.store_reservation(draft)
        logger.info("Room %s chosen for %s..%s", room_id, draft.start_date, draft.end_date)
        return draft

    def book_room(
        self,
        session: ReservationSession,
        raw_room_id: Optional[str],
        raw_start: Optional[str],
        raw_end: Optional[str],
    ) -> Reservation:
        """Seed a draft straight from a room + date-range link."""
        room_id = self.parse_room_id(raw_room_id, "id")
        start_date, end_date = self.parse_date_range(raw_start, raw_end, "s", "e")
        room = self._repository.get_room_by_id(room_id)
        draft = Reservation(
            start_date=start_date,
            end_date=end_date,
            room_id=room.room_id,
            room=room,
        )
        session.store_reservation(draft)
        logger.info("Direct booking link for room %s (%s..%s)", room_id, start_date, end_date)
        return draft

    def reservation_form(self, session: ReservationSession) -> Reservation:
        return session.load_reservation()

    def make_reservation(
        self,
        session: ReservationSession,
        form_data: Mapping[str, FormValue],
    ) -> ReservationSubmission:
        form = Form(form_data)
        start_date, end_date = self.parse_date_range(
            form.get("start_date"), form.get("end_date"), "start_date", "end_date"
        )
        room_id = self.parse_room_id(form.get("room_id"))

        reservation = Reservation(
            first_name=form.get("first_name"),
            last_name=form.get("last_name"),
            phone=form.get("phone"),
            email=form.get("email"),
            start_date=start_date,
            end_date=end_date,
            room_id=room_id,
        )

        form.min_length("first_name", self._settings.first_name_min_length)
        form.required("first_name", "last_name", "email", "phone")
        form.is_email("email")
        if not form.valid():
            logger.info("Reservation details rejected for fields %s", sorted(form.errors))
            return ReservationSubmission(reservation=reservation, form=form)

        room = self._repository.get_room_by_id(room_id)
        committed = self._repository.commit_reservation(replace(reservation, room=room))
        committed = replace(committed, room=room)
        session.store_reservation(committed)
        session.flash(RESERVATION_SAVED_MESSAGE, kind=FLASH_KEY)
        logger.info("Reservation %s committed for room %s", committed.reservation_id, room_id)
        return ReservationSubmission(reservation=committed, form=form, committed=True)

    def reservation_summary(self, session: ReservationSession) -> Reservation:
        """Return the committed reservation exactly once.

        An uncommitted draft is left in the session for the details form.
        """
        if session.load_reservation().reservation_id is None:
            raise SessionMissingError(
                "Reservation in session has not been committed",
                reason="malformed",
            )
        return session.pop_reservation()

    def check_room_availability(
        self,
        raw_start: Optional[str],
        raw_end: Optional[str],
        raw_room_id: Optional[str],
    ) -> RoomAvailabilityCheck:
        """Answer the JSON availability check.

        Malformed input reports `ok=False` with a message naming the problem so
        callers can tell it apart from a genuinely booked room.
        """
        echo = {
            "room_id": raw_room_id or "",
            "start_date": raw_start or "",
            "end_date": raw_end or "",
        }
        try:
            start_date, end_date = self.parse_date_range(raw_start, raw_end)
            room_id = self.parse_room_id(raw_room_id)
            available = self._availability.search_availability_by_date_by_room_id(
                start_date, end_date, room_id
            )
        except (MalformedRequestError, InvalidDateRangeError) as exc:
            logger.warning("Malformed availability check: %s", exc)
            return RoomAvailabilityCheck(ok=False, message=str(exc), **echo)

        message = "Room is available" if available else "Room is not available"
        return RoomAvailabilityCheck(ok=available, message=message, **echo)
