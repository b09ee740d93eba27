"""Domain models for rooms, reservations and room restrictions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import Any, Optional


class RestrictionKind(IntEnum):
    """Rows of the `restrictions` reference table."""

    RESERVATION = 1
    OWNER_BLOCK = 2


@dataclass(frozen=True)
class Room:
    room_id: int
    room_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"room_id": self.room_id, "room_name": self.room_name}


@dataclass(frozen=True)
class Reservation:
    """A guest reservation, drafted in session and persisted on commit.

    `reservation_id` stays None until the repository assigns one.
    """

    start_date: date
    end_date: date
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    room_id: Optional[int] = None
    room: Optional[Room] = None
    reservation_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives for cookie session storage."""
        return {
            "reservation_id": self.reservation_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "room_id": self.room_id,
            "room": self.room.to_dict() if self.room is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "Reservation":
        """Strictly rebuild a reservation; raises ValueError on any mismatch."""
        if not isinstance(payload, dict):
            raise ValueError("reservation payload must be a mapping")
        try:
            start_date = date.fromisoformat(payload["start_date"])
            end_date = date.fromisoformat(payload["end_date"])
            room_payload = payload.get("room")
            room = None
            if room_payload is not None:
                room = Room(
                    room_id=_require_int(room_payload["room_id"]),
                    room_name=_require_str(room_payload["room_name"]),
                )
            room_id = payload.get("room_id")
            reservation_id = payload.get("reservation_id")
            return cls(
                start_date=start_date,
                end_date=end_date,
                first_name=_require_str(payload.get("first_name", "")),
                last_name=_require_str(payload.get("last_name", "")),
                phone=_require_str(payload.get("phone", "")),
                email=_require_str(payload.get("email", "")),
                room_id=None if room_id is None else _require_int(room_id),
                room=room,
                reservation_id=None if reservation_id is None else _require_int(reservation_id),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"reservation payload is malformed: {exc}") from exc


@dataclass(frozen=True)
class RoomRestriction:
    """Blocks `room_id` for the inclusive range `[start_date, end_date]`."""

    start_date: date
    end_date: date
    room_id: int
    restriction_kind: RestrictionKind = RestrictionKind.RESERVATION
    reservation_id: Optional[int] = None
    restriction_row_id: Optional[int] = None


def ranges_overlap(
    existing_start: date,
    existing_end: date,
    requested_start: date,
    requested_end: date,
) -> bool:
    """Inclusive overlap test; ranges that only touch on one day still conflict."""
    return existing_start <= requested_end and existing_end >= requested_start


def _require_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return value


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return value
