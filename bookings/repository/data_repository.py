"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Iterator, Optional

from bookings.domain.models import RestrictionKind, Reservation, Room, RoomRestriction
from bookings.repository.base import (
    RestrictionConflictError,
    RoomNotFoundError,
    StorageError,
)
from bookings.utils.config import Settings, get_settings
from bookings.utils.logger import get_logger


logger = get_logger(__name__)

_OVERLAP_TRIGGER_MESSAGE = "room restriction overlaps an existing restriction"


class SQLiteBookingRepository:
    """Encapsulates SQLite access so the workflow stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection_slots = threading.BoundedSemaphore(
            self._settings.database_max_connections
        )

    @property
    def database_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open one connection for one unit of work, bounded by the slot count."""
        with self._connection_slots:
            connection: sqlite3.Connection | None = None
            try:
                connection = sqlite3.connect(
                    self._db_path,
                    timeout=self._settings.database_timeout_seconds,
                    isolation_level=None,
                )
                connection.row_factory = sqlite3.Row
                connection.execute("PRAGMA foreign_keys = ON;")
                yield connection
            except sqlite3.Error as exc:
                raise StorageError(f"Database operation failed: {exc}") from exc
            finally:
                if connection is not None:
                    connection.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialize writers with BEGIN IMMEDIATE; roll back on any failure."""
        with self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE;")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK;")
                raise
            conn.execute("COMMIT;")

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS rooms (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    room_name TEXT NOT NULL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS restrictions (
                    id INTEGER PRIMARY KEY,
                    restriction_name TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reservations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    room_id INTEGER NOT NULL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    CHECK (start_date <= end_date),
                    FOREIGN KEY (room_id) REFERENCES rooms(id)
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS room_restrictions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    room_id INTEGER NOT NULL,
                    reservation_id INTEGER,
                    restriction_id INTEGER NOT NULL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    CHECK (start_date <= end_date),
                    FOREIGN KEY (room_id) REFERENCES rooms(id),
                    FOREIGN KEY (reservation_id) REFERENCES reservations(id)
                        ON DELETE CASCADE,
                    FOREIGN KEY (restriction_id) REFERENCES restrictions(id)
                );
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_room_restrictions_room_dates
                ON room_restrictions(room_id, start_date, end_date);
                """
            )
            conn.execute(
                f"""
                CREATE TRIGGER IF NOT EXISTS trg_room_restrictions_no_overlap
                BEFORE INSERT ON room_restrictions
                WHEN EXISTS (
                    SELECT 1
                    FROM room_restrictions
                    WHERE room_id = NEW.room_id
                      AND start_date <= NEW.end_date
                      AND end_date >= NEW.start_date
                )
                BEGIN
                    SELECT RAISE(ABORT, '{_OVERLAP_TRIGGER_MESSAGE}');
                END;
                """
            )
            conn.executemany(
                "INSERT OR IGNORE INTO restrictions (id, restriction_name) VALUES (?, ?);",
                [
                    (RestrictionKind.RESERVATION.value, "Reservation"),
                    (RestrictionKind.OWNER_BLOCK.value, "Owner Block"),
                ],
            )
        logger.info("Database initialized at %s", self._db_path)

    def seed_rooms(self) -> int:
        """Insert the configured rooms only when the rooms table is empty."""
        with self._transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS count FROM rooms;").fetchone()
            if int(row["count"]) > 0:
                logger.info("Rooms already present; skipping seed")
                return 0
            conn.executemany(
                "INSERT INTO rooms (room_name) VALUES (?);",
                [(name,) for name in self._settings.seed_room_names],
            )
        logger.info("Seeded %s rooms", len(self._settings.seed_room_names))
        return len(self._settings.seed_room_names)

    def create_room(self, room_name: str) -> Room:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO rooms (room_name) VALUES (?);",
                (room_name,),
            )
            return Room(room_id=int(cursor.lastrowid), room_name=room_name)

    def get_room_by_id(self, room_id: int) -> Room:
        with self._connection() as conn:
            room = self._fetch_room(conn, room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def list_rooms(self) -> list[Room]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, room_name FROM rooms ORDER BY id ASC;"
            ).fetchall()
        return [Room(room_id=int(row["id"]), room_name=str(row["room_name"])) for row in rows]

    def insert_reservation(self, reservation: Reservation) -> int:
        """Insert a bare reservation row; prefer `commit_reservation` for bookings."""
        with self._transaction() as conn:
            return self._insert_reservation(conn, reservation)

    def insert_room_restriction(self, restriction: RoomRestriction) -> int:
        with self._transaction() as conn:
            return self._insert_restriction(conn, restriction)

    def commit_reservation(self, reservation: Reservation) -> Reservation:
        """Insert a reservation and its restriction in a single transaction."""
        if reservation.room_id is None:
            raise ValueError("reservation must reference a room before commit")
        with self._transaction() as conn:
            if self._fetch_room(conn, reservation.room_id) is None:
                raise RoomNotFoundError(reservation.room_id)
            reservation_id = self._insert_reservation(conn, reservation)
            self._insert_restriction(
                conn,
                RoomRestriction(
                    start_date=reservation.start_date,
                    end_date=reservation.end_date,
                    room_id=reservation.room_id,
                    restriction_kind=RestrictionKind.RESERVATION,
                    reservation_id=reservation_id,
                ),
            )
        logger.info(
            "Committed reservation %s for room %s (%s..%s)",
            reservation_id,
            reservation.room_id,
            reservation.start_date.isoformat(),
            reservation.end_date.isoformat(),
        )
        return replace(reservation, reservation_id=reservation_id)

    def search_availability_for_all_rooms(self, start_date: date, end_date: date) -> list[Room]:
        """Return rooms with no restriction overlapping the inclusive range."""
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT r.id, r.room_name
                FROM rooms AS r
                WHERE r.id NOT IN (
                    SELECT rr.room_id
                    FROM room_restrictions AS rr
                    WHERE rr.start_date <= ?
                      AND rr.end_date >= ?
                )
                ORDER BY r.id ASC;
                """,
                (end_date.isoformat(), start_date.isoformat()),
            ).fetchall()
        return [Room(room_id=int(row["id"]), room_name=str(row["room_name"])) for row in rows]

    def search_availability_by_date_by_room_id(
        self,
        start_date: date,
        end_date: date,
        room_id: int,
    ) -> bool:
        with self._connection() as conn:
            return not self._has_overlap(conn, room_id, start_date, end_date)

    def list_room_restrictions(self, room_id: int) -> list[RoomRestriction]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT id, start_date, end_date, room_id, reservation_id, restriction_id
                FROM room_restrictions
                WHERE room_id = ?
                ORDER BY start_date ASC, id ASC;
                """,
                (room_id,),
            ).fetchall()
        return [
            RoomRestriction(
                start_date=date.fromisoformat(row["start_date"]),
                end_date=date.fromisoformat(row["end_date"]),
                room_id=int(row["room_id"]),
                restriction_kind=RestrictionKind(int(row["restriction_id"])),
                reservation_id=(
                    None if row["reservation_id"] is None else int(row["reservation_id"])
                ),
                restriction_row_id=int(row["id"]),
            )
            for row in rows
        ]

    def count_reservations(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS count FROM reservations;").fetchone()
            return int(row["count"])

    def count_room_restrictions(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS count FROM room_restrictions;").fetchone()
            return int(row["count"])

    def _fetch_room(self, conn: sqlite3.Connection, room_id: int) -> Optional[Room]:
        row = conn.execute(
            "SELECT id, room_name FROM rooms WHERE id = ?;",
            (room_id,),
        ).fetchone()
        if row is None:
            return None
        return Room(room_id=int(row["id"]), room_name=str(row["room_name"]))

    def _has_overlap(
        self,
        conn: sqlite3.Connection,
        room_id: int,
        start_date: date,
        end_date: date,
    ) -> bool:
        row = conn.execute(
            """
            SELECT COUNT(*) AS count
            FROM room_restrictions
            WHERE room_id = ?
              AND start_date <= ?
              AND end_date >= ?;
            """,
            (room_id, end_date.isoformat(), start_date.isoformat()),
        ).fetchone()
        return int(row["count"]) > 0

    def _insert_reservation(self, conn: sqlite3.Connection, reservation: Reservation) -> int:
        cursor = conn.execute(
            """
            INSERT INTO reservations (
                first_name,
                last_name,
                email,
                phone,
                start_date,
                end_date,
                room_id
            )
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (
                reservation.first_name,
                reservation.last_name,
                reservation.email,
                reservation.phone,
                reservation.start_date.isoformat(),
                reservation.end_date.isoformat(),
                reservation.room_id,
            ),
        )
        return int(cursor.lastrowid)

    def _insert_restriction(self, conn: sqlite3.Connection, restriction: RoomRestriction) -> int:
        if self._has_overlap(conn, restriction.room_id, restriction.start_date, restriction.end_date):
            raise RestrictionConflictError(
                restriction.room_id, restriction.start_date, restriction.end_date
            )
        try:
            cursor = conn.execute(
                """
                INSERT INTO room_restrictions (
                    start_date,
                    end_date,
                    room_id,
                    reservation_id,
                    restriction_id
                )
                VALUES (?, ?, ?, ?, ?);
                """,
                (
                    restriction.start_date.isoformat(),
                    restriction.end_date.isoformat(),
                    restriction.room_id,
                    restriction.reservation_id,
                    restriction.restriction_kind.value,
                ),
            )
        except sqlite3.IntegrityError as exc:
            if _OVERLAP_TRIGGER_MESSAGE in str(exc):
                raise RestrictionConflictError(
                    restriction.room_id, restriction.start_date, restriction.end_date
                ) from exc
            raise
        return int(cursor.lastrowid)
