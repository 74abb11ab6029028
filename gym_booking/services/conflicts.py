"""Conflict detection and cooldown checks over existing reservations."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, NamedTuple, Optional

from ..models.entities import Candidate, ConflictReason, Reservation
from .intervals import COOLDOWN, overlaps, violates_cooldown


class Conflict(NamedTuple):
    """Blocking reservation paired with the reason it blocks the candidate."""

    reservation: Reservation
    reason: ConflictReason


def classify(candidate: Candidate, reservation: Reservation) -> ConflictReason:
    """Name the resource(s) an overlapping reservation shares with the candidate."""

    same_machine = reservation.machine_id == candidate.machine_id
    same_instructor = reservation.instructor_id == candidate.instructor_id
    if same_machine and same_instructor:
        return ConflictReason.MACHINE_AND_INSTRUCTOR
    if same_machine:
        return ConflictReason.MACHINE
    return ConflictReason.INSTRUCTOR


def _by_id(reservations: Iterable[Reservation]) -> list[Reservation]:
    return sorted(reservations, key=lambda reservation: reservation.reservation_id)


def find_conflict(candidate: Candidate, reservations: Iterable[Reservation]) -> Optional[Conflict]:
    """Return the lowest-id reservation overlapping the candidate on a shared resource.

    ``reservations`` is expected to hold reservations matching the candidate's
    machine or instructor; rows sharing neither are ignored.
    """

    for reservation in _by_id(reservations):
        if reservation.status != "confirmed":
            continue
        if (
            reservation.machine_id != candidate.machine_id
            and reservation.instructor_id != candidate.instructor_id
        ):
            continue
        if overlaps(candidate.start_time, candidate.end_time, reservation.start_time, reservation.end_time):
            return Conflict(reservation, classify(candidate, reservation))
    return None


def find_cooldown_violation(
    candidate: Candidate,
    reservations: Iterable[Reservation],
    cooldown: timedelta = COOLDOWN,
) -> Optional[Conflict]:
    """Return the lowest-id reservation on the candidate's machine that breaks the cooldown gap.

    Instructors have no cooldown, so reservations on other machines are skipped.
    """

    for reservation in _by_id(reservations):
        if reservation.status != "confirmed" or reservation.machine_id != candidate.machine_id:
            continue
        if violates_cooldown(
            reservation.start_time,
            reservation.end_time,
            candidate.start_time,
            candidate.end_time,
            cooldown,
        ):
            return Conflict(reservation, ConflictReason.COOLDOWN)
    return None
