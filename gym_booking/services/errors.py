"""Exceptions raised by the booking engine and its storage layer."""

from __future__ import annotations

from typing import Optional

from ..models.entities import ConflictReason


class BookingError(Exception):
    """Base class for every booking engine failure."""


class InvalidInput(BookingError):
    """Candidate is malformed, non-chronological, or references unknown ids."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class BookingRejected(BookingError):
    """Candidate is well formed but cannot be admitted."""

    message = "Booking rejected"

    def __init__(self, reason: ConflictReason, conflict_booking_id: int) -> None:
        super().__init__(f"{self.message} ({reason.value}, booking {conflict_booking_id})")
        self.reason = reason
        self.conflict_booking_id = conflict_booking_id


class ResourceConflict(BookingRejected):
    """Candidate overlaps a reservation on its machine, instructor, or both."""

    message = "Time slot conflicts with existing booking"


class CooldownViolation(BookingRejected):
    """Candidate sits inside the cooldown buffer of a reservation on its machine."""

    message = "Machine needs a cooldown gap between bookings"

    def __init__(self, conflict_booking_id: int) -> None:
        super().__init__(ConflictReason.COOLDOWN, conflict_booking_id)


class TransientStorageError(BookingError):
    """Storage failed in a way that is safe to retry with fresh reads."""


class StorageUnavailable(TransientStorageError):
    """Storage could not be reached or timed out waiting for a lock."""


class ConstraintViolation(TransientStorageError):
    """Storage refused the write, typically because a concurrent insert won the slot."""
