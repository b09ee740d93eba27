from __future__ import annotations

from datetime import date

import pytest

from bookings.domain.models import Reservation, Room
from bookings.services.session_service import (
    FLASH_KEY,
    RESERVATION_KEY,
    ReservationSession,
    SessionMissingError,
)


def test_missing_reservation_is_reported_as_missing() -> None:
    session = ReservationSession({})

    with pytest.raises(SessionMissingError) as exc_info:
        session.load_reservation()

    assert exc_info.value.reason == "missing"


def test_stored_reservation_is_json_compatible_and_reloads() -> None:
    store: dict = {}
    session = ReservationSession(store)
    reservation = Reservation(
        start_date=date(2030, 6, 1),
        end_date=date(2030, 6, 5),
        room_id=3,
        room=Room(room_id=3, room_name="Colonel's Cabin"),
    )

    session.store_reservation(reservation)

    assert store[RESERVATION_KEY]["start_date"] == "2030-06-01"
    assert session.load_reservation() == reservation


@pytest.mark.parametrize(
    "payload",
    [
        "not a mapping",
        {"start_date": "2030-06-01"},
        {"start_date": "06/01/2030", "end_date": "2030-06-05"},
        {"start_date": "2030-06-01", "end_date": "2030-06-05", "room_id": "3"},
        {"start_date": "2030-06-01", "end_date": "2030-06-05", "room": {"room_id": 3}},
    ],
)
def test_malformed_payload_is_never_guessed(payload) -> None:
    session = ReservationSession({RESERVATION_KEY: payload})

    with pytest.raises(SessionMissingError) as exc_info:
        session.load_reservation()

    assert exc_info.value.reason == "malformed"


def test_pop_reservation_reads_once() -> None:
    session = ReservationSession({})
    session.store_reservation(Reservation(start_date=date(2030, 6, 1), end_date=date(2030, 6, 2)))

    assert session.pop_reservation().end_date == date(2030, 6, 2)
    assert not session.has_reservation()
    with pytest.raises(SessionMissingError):
        session.pop_reservation()


def test_flash_messages_are_read_once_per_kind() -> None:
    session = ReservationSession({})
    session.flash("No Availability")
    session.flash("Reservation saved", kind=FLASH_KEY)

    assert session.pop_flash() == "No Availability"
    assert session.pop_flash() is None
    assert session.pop_flash(FLASH_KEY) == "Reservation saved"
