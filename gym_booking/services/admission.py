"""Admission decision for candidate reservations."""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta
from typing import Dict, Iterator, Optional, Tuple

from ..models.entities import Candidate, Reservation
from .conflicts import find_conflict, find_cooldown_violation
from .errors import CooldownViolation, InvalidInput, ResourceConflict, TransientStorageError
from .intervals import COOLDOWN, within_supported_range
from .repository import ReservationRepository

logger = logging.getLogger(__name__)


class ResourceLockRegistry:
    """Hands out one lock per machine id and per instructor id.

    Locks are always taken machine first, instructor second, so two admissions
    can never wait on each other in a cycle.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[str, int], threading.Lock] = {}

    def _lock_for(self, kind: str, resource_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault((kind, resource_id), threading.Lock())

    @contextmanager
    def hold(self, machine_id: int, instructor_id: int) -> Iterator[None]:
        with ExitStack() as stack:
            stack.enter_context(self._lock_for("machine", machine_id))
            stack.enter_context(self._lock_for("instructor", instructor_id))
            yield


def validate_candidate(candidate: Candidate) -> None:
    """Reject malformed candidates without touching storage."""

    for field in ("user_id", "machine_id", "instructor_id"):
        value = getattr(candidate, field)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidInput(f"{field} must be a positive integer.", field=field)
    for field in ("start_time", "end_time"):
        value = getattr(candidate, field)
        if not isinstance(value, datetime) or value.tzinfo is None:
            raise InvalidInput(f"{field} must be a timezone-aware datetime.", field=field)
    if candidate.start_time >= candidate.end_time:
        raise InvalidInput("End time must be after start time.", field="end_time")
    if not within_supported_range(candidate.start_time, candidate.end_time):
        raise InvalidInput("Times must fall between the years 1000 and 9998.", field="start_time")


class AdmissionController:
    """Decides whether a candidate may be booked and commits it when it can.

    Every decision re-reads storage. The check and the insert run under the
    per-resource locks and inside a repository transaction, so two
    overlapping candidates cannot both be admitted.
    """

    def __init__(
        self,
        repository: ReservationRepository,
        locks: Optional[ResourceLockRegistry] = None,
        cooldown: timedelta = COOLDOWN,
        retries: int = 1,
    ) -> None:
        self._repository = repository
        self._locks = locks or ResourceLockRegistry()
        self._cooldown = cooldown
        self._retries = retries

    def admit(self, candidate: Candidate) -> Reservation:
        """Return the confirmed reservation or raise why it was refused.

        Raises :class:`InvalidInput`, :class:`ResourceConflict`,
        :class:`CooldownViolation`, or a :class:`TransientStorageError` once
        the retry budget is spent.
        """

        validate_candidate(candidate)
        attempt = 0
        while True:
            try:
                return self._attempt(candidate)
            except TransientStorageError as exc:
                if attempt >= self._retries:
                    raise
                attempt += 1
                logger.warning("Retrying admission after storage failure: %s", exc)

    def _ensure_resolvable(self, candidate: Candidate) -> None:
        if self._repository.get_user(candidate.user_id) is None:
            raise InvalidInput(f"User {candidate.user_id} does not exist.", field="user_id")
        if self._repository.get_machine(candidate.machine_id) is None:
            raise InvalidInput(f"Machine {candidate.machine_id} does not exist.", field="machine_id")
        if self._repository.get_instructor(candidate.instructor_id) is None:
            raise InvalidInput(f"Instructor {candidate.instructor_id} does not exist.", field="instructor_id")

    def _attempt(self, candidate: Candidate) -> Reservation:
        self._ensure_resolvable(candidate)
        with self._locks.hold(candidate.machine_id, candidate.instructor_id), self._repository.transaction():
            existing = self._repository.find_reservations_for_resource(
                machine_id=candidate.machine_id,
                instructor_id=candidate.instructor_id,
            )

            conflict = find_conflict(candidate, existing)
            if conflict:
                logger.info(
                    "Conflict on %s with booking %s (%s - %s)",
                    conflict.reason.value,
                    conflict.reservation.reservation_id,
                    conflict.reservation.start_time.isoformat(),
                    conflict.reservation.end_time.isoformat(),
                )
                raise ResourceConflict(conflict.reason, conflict.reservation.reservation_id)

            same_machine = [r for r in existing if r.machine_id == candidate.machine_id]
            violation = find_cooldown_violation(candidate, same_machine, self._cooldown)
            if violation:
                logger.info(
                    "Cooldown conflict on machine %s with booking %s",
                    candidate.machine_id,
                    violation.reservation.reservation_id,
                )
                raise CooldownViolation(violation.reservation.reservation_id)

            reservation = self._repository.insert_reservation(candidate)
        logger.info("Booking %s created", reservation.reservation_id)
        return reservation
