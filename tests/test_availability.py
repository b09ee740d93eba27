"""Availability checks against both repository implementations.

A single restriction on room 1 covers 2030-06-10..2030-06-15; every query
range that shares at least one day with it (inclusive on both ends) must
exclude room 1, while room 2 stays free throughout.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from bookings.domain.models import RestrictionKind, Room, RoomRestriction, ranges_overlap
from bookings.repository.data_repository import SQLiteBookingRepository
from bookings.repository.memory_repository import InMemoryBookingRepository
from bookings.services.availability_service import AvailabilityService, InvalidDateRangeError
from bookings.utils.config import get_settings


RESTRICTION = RoomRestriction(
    start_date=date(2030, 6, 10),
    end_date=date(2030, 6, 15),
    room_id=1,
    restriction_kind=RestrictionKind.OWNER_BLOCK,
)


def _sqlite_repository(tmp_path):
    settings = replace(get_settings(), database_path=tmp_path / "availability.db")
    repository = SQLiteBookingRepository(settings)
    repository.initialize_database()
    repository.seed_rooms()
    return repository


def _memory_repository(tmp_path):
    return InMemoryBookingRepository(
        [Room(room_id=1, room_name="General's Quarters"), Room(room_id=2, room_name="Major's Suite")]
    )


@pytest.fixture(params=[_sqlite_repository, _memory_repository], ids=["sqlite", "memory"])
def availability_service(request, tmp_path) -> AvailabilityService:
    repository = request.param(tmp_path)
    repository.insert_room_restriction(RESTRICTION)
    return AvailabilityService(repository)


@pytest.mark.parametrize(
    "start, end, room_1_free",
    [
        ("2030-06-01", "2030-06-09", True),
        ("2030-06-01", "2030-06-10", False),
        ("2030-06-15", "2030-06-20", False),
        ("2030-06-16", "2030-06-20", True),
        ("2030-06-11", "2030-06-12", False),
        ("2030-06-01", "2030-06-30", False),
        ("2030-06-12", "2030-06-12", False),
    ],
)
def test_restriction_overlap_controls_availability(availability_service, start, end, room_1_free):
    start_date = date.fromisoformat(start)
    end_date = date.fromisoformat(end)

    free_room_ids = [
        room.room_id
        for room in availability_service.search_availability_for_all_rooms(start_date, end_date)
    ]

    assert (1 in free_room_ids) is room_1_free
    assert 2 in free_room_ids
    assert (
        availability_service.search_availability_by_date_by_room_id(start_date, end_date, 1)
        is room_1_free
    )


def test_results_are_ordered_by_room_id(availability_service):
    rooms = availability_service.search_availability_for_all_rooms(
        date(2031, 1, 1), date(2031, 1, 2)
    )

    assert [room.room_id for room in rooms] == [1, 2]


def test_reversed_range_is_rejected(availability_service):
    with pytest.raises(InvalidDateRangeError):
        availability_service.search_availability_for_all_rooms(date(2030, 6, 5), date(2030, 6, 1))


def test_ranges_overlap_is_inclusive() -> None:
    assert ranges_overlap(date(2030, 1, 1), date(2030, 1, 3), date(2030, 1, 3), date(2030, 1, 4))
    assert not ranges_overlap(date(2030, 1, 1), date(2030, 1, 3), date(2030, 1, 4), date(2030, 1, 5))
