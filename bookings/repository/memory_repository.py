"""In-process repository used as a test double for the workflow."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from threading import RLock

from bookings.domain.models import (
    RestrictionKind,
    Reservation,
    Room,
    RoomRestriction,
    ranges_overlap,
)
from bookings.repository.base import RestrictionConflictError, RoomNotFoundError


class InMemoryBookingRepository:
    """Dict-backed storage with the same semantics as the SQLite repository."""

    def __init__(self, rooms: list[Room] | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[int, Room] = {room.room_id: room for room in rooms or []}
        self._reservations: dict[int, Reservation] = {}
        self._restrictions: list[RoomRestriction] = []
        self._next_reservation_id = 1
        self._next_restriction_id = 1

    @property
    def reservations(self) -> list[Reservation]:
        with self._lock:
            return [self._reservations[key] for key in sorted(self._reservations)]

    @property
    def restrictions(self) -> list[RoomRestriction]:
        with self._lock:
            return list(self._restrictions)

    def create_room(self, room_name: str) -> Room:
        with self._lock:
            room_id = max(self._rooms, default=0) + 1
            room = Room(room_id=room_id, room_name=room_name)
            self._rooms[room_id] = room
            return room

    def insert_reservation(self, reservation: Reservation) -> int:
        with self._lock:
            reservation_id = self._next_reservation_id
            self._next_reservation_id += 1
            self._reservations[reservation_id] = replace(
                reservation, reservation_id=reservation_id
            )
            return reservation_id

    def insert_room_restriction(self, restriction: RoomRestriction) -> int:
        with self._lock:
            self._ensure_room_free(
                restriction.room_id, restriction.start_date, restriction.end_date
            )
            restriction_row_id = self._next_restriction_id
            self._next_restriction_id += 1
            self._restrictions.append(
                replace(restriction, restriction_row_id=restriction_row_id)
            )
            return restriction_row_id

    def commit_reservation(self, reservation: Reservation) -> Reservation:
        if reservation.room_id is None:
            raise ValueError("reservation must reference a room before commit")
        with self._lock:
            self.get_room_by_id(reservation.room_id)
            self._ensure_room_free(
                reservation.room_id, reservation.start_date, reservation.end_date
            )
            reservation_id = self.insert_reservation(reservation)
            self.insert_room_restriction(
                RoomRestriction(
                    start_date=reservation.start_date,
                    end_date=reservation.end_date,
                    room_id=reservation.room_id,
                    restriction_kind=RestrictionKind.RESERVATION,
                    reservation_id=reservation_id,
                )
            )
            return self._reservations[reservation_id]

    def get_room_by_id(self, room_id: int) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return [self._rooms[key] for key in sorted(self._rooms)]

    def search_availability_for_all_rooms(self, start_date: date, end_date: date) -> list[Room]:
        with self._lock:
            return [
                room
                for room in self.list_rooms()
                if not self._has_overlap(room.room_id, start_date, end_date)
            ]

    def search_availability_by_date_by_room_id(
        self,
        start_date: date,
        end_date: date,
        room_id: int,
    ) -> bool:
        with self._lock:
            return not self._has_overlap(room_id, start_date, end_date)

    def _has_overlap(self, room_id: int, start_date: date, end_date: date) -> bool:
        return any(
            restriction.room_id == room_id
            and ranges_overlap(
                restriction.start_date, restriction.end_date, start_date, end_date
            )
            for restriction in self._restrictions
        )

    def _ensure_room_free(self, room_id: int, start_date: date, end_date: date) -> None:
        if self._has_overlap(room_id, start_date, end_date):
            raise RestrictionConflictError(room_id, start_date, end_date)
