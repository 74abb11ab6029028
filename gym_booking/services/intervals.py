"""Interval predicates shared by the admission and availability checks.

All intervals are half-open, ``[start, end)``: an interval ending at 10:00
does not overlap one starting at 10:00.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

COOLDOWN = timedelta(minutes=10)
EARTH_RADIUS_KM = 6371.0

# Bookable range. Either bound padded by a cooldown stays within four-digit years.
EARLIEST_INSTANT = datetime(1000, 1, 1, tzinfo=timezone.utc)
LATEST_INSTANT = datetime(9999, 1, 1, tzinfo=timezone.utc)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Return True when ``[a_start, a_end)`` and ``[b_start, b_end)`` share an instant."""

    return a_start < b_end and b_start < a_end


def within_supported_range(start: datetime, end: datetime) -> bool:
    """True when both aware instants lie in ``[EARLIEST_INSTANT, LATEST_INSTANT]``."""

    return EARLIEST_INSTANT <= start and end <= LATEST_INSTANT


def violates_cooldown(
    existing_start: datetime,
    existing_end: datetime,
    candidate_start: datetime,
    candidate_end: datetime,
    cooldown: timedelta = COOLDOWN,
) -> bool:
    """Return True when an existing reservation sits inside the candidate's cooldown buffer.

    Two near-miss cases are flagged:

    * the existing reservation starts before the candidate and ends after
      ``candidate_start - cooldown``;
    * the existing reservation starts at or after ``candidate_end`` but before
      ``candidate_end + cooldown``.

    Callers check :func:`overlaps` first; some overlapping reservations also
    match here, but they never reach this check.
    """

    bleeds_into_pre_buffer = existing_end > candidate_start - cooldown and existing_start < candidate_start
    starts_in_post_buffer = candidate_end <= existing_start < candidate_end + cooldown
    return bleeds_into_pre_buffer or starts_in_post_buffer


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two coordinates on a spherical Earth."""

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
