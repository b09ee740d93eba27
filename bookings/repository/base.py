"""Repository contract shared by every storage backend."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from bookings.domain.models import Reservation, Room, RoomRestriction


class RepositoryError(Exception):
    """Base exception for persistence failures."""


class StorageError(RepositoryError):
    """Raised when the storage backend fails."""


class RoomNotFoundError(RepositoryError):
    """Raised when a room id does not exist."""

    def __init__(self, room_id: int) -> None:
        super().__init__(f"Room {room_id} does not exist")
        self.room_id = room_id


class RestrictionConflictError(RepositoryError):
    """Raised when a restriction would overlap another one on the same room."""

    def __init__(self, room_id: int, start_date: date, end_date: date) -> None:
        super().__init__(
            f"Room {room_id} is already restricted between "
            f"{start_date.isoformat()} and {end_date.isoformat()}"
        )
        self.room_id = room_id
        self.start_date = start_date
        self.end_date = end_date


@runtime_checkable
class BookingRepository(Protocol):
    """Operations the booking workflow needs from storage.

    Each call is atomic with respect to concurrent callers. `commit_reservation`
    inserts a reservation and its restriction as one unit of work: either both
    rows become visible or neither does.
    """

    def insert_reservation(self, reservation: Reservation) -> int:
        ...

    def insert_room_restriction(self, restriction: RoomRestriction) -> int:
        ...

    def commit_reservation(self, reservation: Reservation) -> Reservation:
        ...

    def get_room_by_id(self, room_id: int) -> Room:
        ...

    def list_rooms(self) -> list[Room]:
        ...

    def search_availability_for_all_rooms(self, start_date: date, end_date: date) -> list[Room]:
        ...

    def search_availability_by_date_by_room_id(
        self,
        start_date: date,
        end_date: date,
        room_id: int,
    ) -> bool:
        ...
