"""Availability checks over room restrictions."""

from __future__ import annotations

from datetime import date

from bookings.domain.models import Room
from bookings.repository.base import BookingRepository
from bookings.utils.logger import get_logger


logger = get_logger(__name__)


class InvalidDateRangeError(ValueError):
    """Raised when the requested end date precedes the start date."""


class AvailabilityService:
    """Answers which rooms are free for an inclusive date range.

    Storage errors propagate unchanged; an empty result is a valid answer.
    """

    def __init__(self, repository: BookingRepository) -> None:
        self._repository = repository

    def search_availability_for_all_rooms(self, start_date: date, end_date: date) -> list[Room]:
        _validate_range(start_date, end_date)
        rooms = self._repository.search_availability_for_all_rooms(start_date, end_date)
        rooms = sorted(rooms, key=lambda room: room.room_id)
        logger.info(
            "Availability search %s..%s found %s rooms",
            start_date.isoformat(),
            end_date.isoformat(),
            len(rooms),
        )
        return rooms

    def search_availability_by_date_by_room_id(
        self,
        start_date: date,
        end_date: date,
        room_id: int,
    ) -> bool:
        _validate_range(start_date, end_date)
        return self._repository.search_availability_by_date_by_room_id(
            start_date, end_date, room_id
        )


def _validate_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise InvalidDateRangeError("end date must not be before start date")
