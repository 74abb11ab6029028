"""Data access helpers for bookings and the sqlite reservation repository."""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, Optional, Sequence

from ..models.entities import Candidate, Instructor, Machine, Reservation, User
from ..services.errors import ConstraintViolation, StorageUnavailable
from ..services.repository import MachineWithReservations
from . import instructors_dao, machines_dao, users_dao
from .db import (
    execute,
    format_timestamp,
    get_db,
    immediate_transaction,
    parse_timestamp,
    query_all,
    query_one,
)


def _row_to_reservation(row) -> Reservation:
    return Reservation(
        reservation_id=row["booking_id"],
        user_id=row["user_id"],
        machine_id=row["machine_id"],
        instructor_id=row["instructor_id"],
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row["end_time"]),
        status=row["status"],
        created_at=parse_timestamp(row["created_at"]),
    )


def get_booking_by_id(booking_id: int, connection=None) -> Reservation | None:
    """Fetch a specific booking."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM bookings WHERE booking_id = ?",
        (booking_id,),
    )
    return _row_to_reservation(row) if row else None


def list_bookings_with_details() -> list[Dict[str, Any]]:
    """Every booking by start time, with its user, instructor and machine embedded."""

    db = get_db()
    bookings = SqliteReservationRepository(db).list_reservations()
    users = {user.user_id: user for user in users_dao.list_users()}
    instructors = {instructor.instructor_id: instructor for instructor in instructors_dao.list_instructors()}
    machines = {machine.machine_id: machine for machine in machines_dao.list_machines(db)}

    enriched = []
    for booking in bookings:
        payload = booking.to_dict()
        payload["user"] = users[booking.user_id].to_dict() if booking.user_id in users else None
        payload["instructor"] = (
            instructors[booking.instructor_id].to_dict() if booking.instructor_id in instructors else None
        )
        payload["machine"] = machines[booking.machine_id].to_dict() if booking.machine_id in machines else None
        enriched.append(payload)
    return enriched


@contextmanager
def _storage_errors() -> Iterator[None]:
    """Translate sqlite failures into the engine's transient error classes."""

    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise ConstraintViolation(str(exc)) from exc
    except sqlite3.OperationalError as exc:
        raise StorageUnavailable(str(exc)) from exc


class SqliteReservationRepository:
    """Reservation repository over a single sqlite connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._db = connection
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with _storage_errors(), immediate_transaction(self._db):
            self._in_transaction = True
            try:
                yield
            finally:
                self._in_transaction = False

    def get_user(self, user_id: int) -> Optional[User]:
        with _storage_errors():
            return users_dao.get_user_by_id(user_id, connection=self._db)

    def get_machine(self, machine_id: int) -> Optional[Machine]:
        with _storage_errors():
            return machines_dao.get_machine_by_id(machine_id, connection=self._db)

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:
        with _storage_errors():
            return instructors_dao.get_instructor_by_id(instructor_id, connection=self._db)

    def find_reservations_for_resource(
        self,
        machine_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
    ) -> list[Reservation]:
        clauses = []
        params: list = []
        if machine_id is not None:
            clauses.append("machine_id = ?")
            params.append(machine_id)
        if instructor_id is not None:
            clauses.append("instructor_id = ?")
            params.append(instructor_id)
        if not clauses:
            return []
        query = f"""
            SELECT * FROM bookings
            WHERE status = 'confirmed' AND ({" OR ".join(clauses)})
            ORDER BY booking_id ASC
        """
        with _storage_errors():
            rows = query_all(self._db, query, params)
        return [_row_to_reservation(row) for row in rows]

    def insert_reservation(self, candidate: Candidate) -> Reservation:
        params = (
            candidate.user_id,
            candidate.machine_id,
            candidate.instructor_id,
            format_timestamp(candidate.start_time),
            format_timestamp(candidate.end_time),
        )
        query = """
            INSERT INTO bookings (user_id, machine_id, instructor_id, start_time, end_time, status)
            VALUES (?, ?, ?, ?, ?, 'confirmed')
        """
        with _storage_errors():
            if self._in_transaction:
                cursor = self._db.execute(query, params)
            else:
                cursor = execute(self._db, query, params)
            return get_booking_by_id(cursor.lastrowid, connection=self._db)

    def list_reservations(self) -> list[Reservation]:
        """Every booking, earliest start first."""

        with _storage_errors():
            rows = query_all(self._db, "SELECT * FROM bookings ORDER BY start_time ASC, booking_id ASC")
        return [_row_to_reservation(row) for row in rows]

    def list_machines_with_reservations_in_window(
        self,
        start: datetime,
        end: datetime,
        cooldown: timedelta,
    ) -> Sequence[MachineWithReservations]:
        with _storage_errors():
            machines = machines_dao.list_machines(self._db)
            rows = query_all(
                self._db,
                """
                SELECT * FROM bookings
                WHERE status = 'confirmed'
                  AND start_time < ?
                  AND end_time > ?
                ORDER BY booking_id ASC
                """,
                (format_timestamp(end + cooldown), format_timestamp(start - cooldown)),
            )
        by_machine: Dict[int, list[Reservation]] = defaultdict(list)
        for row in rows:
            reservation = _row_to_reservation(row)
            by_machine[reservation.machine_id].append(reservation)
        return [(machine, by_machine.get(machine.machine_id, [])) for machine in machines]
