"""Storage interface consumed by the booking engine."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import ContextManager, Optional, Protocol, Sequence, Tuple

from ..models.entities import Candidate, Instructor, Machine, Reservation, User

MachineWithReservations = Tuple[Machine, Sequence[Reservation]]


class ReservationRepository(Protocol):
    """What the admission and availability checks need from storage.

    Implementations raise :class:`~gym_booking.services.errors.StorageUnavailable`
    when storage cannot be reached and
    :class:`~gym_booking.services.errors.ConstraintViolation` when a write is
    refused.
    """

    def transaction(self) -> ContextManager[None]:
        """Serialize a read-then-write sequence against other writers."""

    def get_user(self, user_id: int) -> Optional[User]:
        ...

    def get_machine(self, machine_id: int) -> Optional[Machine]:
        ...

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:
        ...

    def find_reservations_for_resource(
        self,
        machine_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
    ) -> Sequence[Reservation]:
        """Confirmed reservations on the machine or the instructor, lowest id first."""

    def insert_reservation(self, candidate: Candidate) -> Reservation:
        """Persist the candidate as a confirmed reservation."""

    def list_machines_with_reservations_in_window(
        self,
        start: datetime,
        end: datetime,
        cooldown: timedelta,
    ) -> Sequence[MachineWithReservations]:
        """Every machine with the reservations near ``[start, end)``, machines by ascending id."""
