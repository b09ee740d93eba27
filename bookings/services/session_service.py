"""Per-user session access for the multi-step reservation workflow."""

from __future__ import annotations

from typing import Any, MutableMapping, Optional

from bookings.domain.models import Reservation


RESERVATION_KEY = "reservation"
ERROR_KEY = "error"
FLASH_KEY = "flash"


class SessionMissingError(Exception):
    """Raised when the session holds no usable reservation.

    `reason` is "missing" when the key is absent and "malformed" when the
    stored value cannot be read back as a reservation.
    """

    def __init__(self, message: str, reason: str = "missing") -> None:
        super().__init__(message)
        self.reason = reason


class ReservationSession:
    """Typed view over one user's session mapping.

    Wraps `request.session` in the web layer and a plain dict in tests; the
    mapping only ever holds JSON-compatible values.
    """

    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store = store

    def load_reservation(self) -> Reservation:
        if RESERVATION_KEY not in self._store:
            raise SessionMissingError("Can't get reservation from session")
        try:
            return Reservation.from_dict(self._store[RESERVATION_KEY])
        except ValueError as exc:
            raise SessionMissingError(
                "Reservation in session is malformed",
                reason="malformed",
            ) from exc

    def store_reservation(self, reservation: Reservation) -> None:
        self._store[RESERVATION_KEY] = reservation.to_dict()

    def remove_reservation(self) -> None:
        self._store.pop(RESERVATION_KEY, None)

    def pop_reservation(self) -> Reservation:
        """Read the reservation once; it is removed even when malformed."""
        try:
            return self.load_reservation()
        finally:
            self.remove_reservation()

    def has_reservation(self) -> bool:
        return RESERVATION_KEY in self._store

    def flash(self, message: str, kind: str = ERROR_KEY) -> None:
        self._store[kind] = message

    def pop_flash(self, kind: str = ERROR_KEY) -> Optional[str]:
        value = self._store.pop(kind, None)
        if value is None:
            return None
        return str(value)
