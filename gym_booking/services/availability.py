"""Nearest available machines for a time window."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Sequence

from ..models.entities import Machine, Reservation
from .errors import InvalidInput
from .intervals import COOLDOWN, haversine_km, overlaps, violates_cooldown, within_supported_range
from .repository import MachineWithReservations, ReservationRepository

MAX_PAGE_SIZE = 50


@dataclass(frozen=True)
class AvailabilityQuery:
    start_time: datetime
    end_time: datetime
    lat: float
    lng: float
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class MachineDistance:
    machine: Machine
    distance: float

    def to_dict(self) -> Dict[str, Any]:
        payload = self.machine.to_dict()
        payload["distance"] = self.distance
        return payload


@dataclass
class AvailabilityPage:
    page: int
    limit: int
    total: int
    machines: List[MachineDistance] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "machines": [entry.to_dict() for entry in self.machines],
        }


def is_blocked(
    reservation: Reservation,
    start: datetime,
    end: datetime,
    cooldown: timedelta = COOLDOWN,
) -> bool:
    """True when the reservation overlaps the window or crowds its cooldown buffer."""

    if reservation.status != "confirmed":
        return False
    return overlaps(start, end, reservation.start_time, reservation.end_time) or violates_cooldown(
        reservation.start_time, reservation.end_time, start, end, cooldown
    )


def _validate(query: AvailabilityQuery, max_page_size: int) -> int:
    if query.start_time >= query.end_time:
        raise InvalidInput("endTime must be after startTime.", field="endTime")
    if not within_supported_range(query.start_time, query.end_time):
        raise InvalidInput("startTime and endTime must fall between the years 1000 and 9998.", field="startTime")
    if not -90 <= query.lat <= 90:
        raise InvalidInput("lat must be between -90 and 90.", field="lat")
    if not -180 <= query.lng <= 180:
        raise InvalidInput("lng must be between -180 and 180.", field="lng")
    if query.page < 1:
        raise InvalidInput("page must be at least 1.", field="page")
    if query.limit < 1:
        raise InvalidInput("limit must be at least 1.", field="limit")
    return min(query.limit, max_page_size)


def _rank(
    query: AvailabilityQuery,
    machines: Iterable[MachineWithReservations],
    cooldown: timedelta,
    limit: int,
) -> AvailabilityPage:
    available: List[MachineDistance] = []
    for machine, reservations in machines:
        if any(is_blocked(r, query.start_time, query.end_time, cooldown) for r in reservations):
            continue
        distance = haversine_km(query.lat, query.lng, machine.latitude, machine.longitude)
        available.append(MachineDistance(machine, distance))

    available.sort(key=lambda entry: entry.distance)
    offset = (query.page - 1) * limit
    return AvailabilityPage(
        page=query.page,
        limit=limit,
        total=len(available),
        machines=available[offset : offset + limit],
    )


def filter_available(
    query: AvailabilityQuery,
    machines: Iterable[MachineWithReservations],
    cooldown: timedelta = COOLDOWN,
    max_page_size: int = MAX_PAGE_SIZE,
) -> AvailabilityPage:
    """Rank machines free during the window by distance and slice out one page.

    ``total`` counts every available machine, not just the returned page.
    Equal distances keep their input order.
    """

    return _rank(query, machines, cooldown, _validate(query, max_page_size))


def find_available_machines(
    repository: ReservationRepository,
    query: AvailabilityQuery,
    cooldown: timedelta = COOLDOWN,
    max_page_size: int = MAX_PAGE_SIZE,
) -> AvailabilityPage:
    """Load machines near the window from storage and filter them."""

    limit = _validate(query, max_page_size)
    machines: Sequence[MachineWithReservations] = repository.list_machines_with_reservations_in_window(
        query.start_time, query.end_time, cooldown
    )
    return _rank(query, machines, cooldown, limit)
