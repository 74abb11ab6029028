"""Interval, cooldown and distance predicate tests."""

from __future__ import annotations

from datetime import timedelta
from itertools import product

import pytest

from gym_booking.services.intervals import COOLDOWN, haversine_km, overlaps, violates_cooldown

from conftest import T

H = timedelta(hours=1)
M = timedelta(minutes=1)

SAMPLE_INTERVALS = [
    (T, T + H),
    (T + 30 * M, T + 90 * M),
    (T + H, T + 2 * H),
    (T - H, T),
    (T - H, T + 3 * H),
    (T + 10 * M, T + 20 * M),
]


def test_overlap_is_symmetric():
    for (a_start, a_end), (b_start, b_end) in product(SAMPLE_INTERVALS, repeat=2):
        assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)


def test_interval_overlaps_itself():
    for start, end in SAMPLE_INTERVALS:
        assert overlaps(start, end, start, end)


def test_touching_endpoints_do_not_overlap():
    assert not overlaps(T, T + H, T + H, T + 2 * H)
    assert not overlaps(T + H, T + 2 * H, T, T + H)


def test_containment_and_partial_overlap():
    assert overlaps(T, T + 3 * H, T + H, T + 2 * H)
    assert overlaps(T, T + H, T + 30 * M, T + 2 * H)


@pytest.mark.parametrize(
    "existing, candidate, expected",
    [
        # Existing ends five minutes before the candidate starts.
        ((T - H, T - 5 * M), (T, T + H), True),
        # Existing ends exactly ten minutes before: the gap is long enough.
        ((T - H, T - 10 * M), (T, T + H), False),
        # Existing ends right as the candidate starts.
        ((T - H, T), (T, T + H), True),
        # Existing starts five minutes after the candidate ends.
        ((T + H + 5 * M, T + 2 * H), (T, T + H), True),
        # Existing starts right as the candidate ends.
        ((T + H, T + 2 * H), (T, T + H), True),
        # Existing starts exactly ten minutes after the candidate ends.
        ((T + H + 10 * M, T + 2 * H), (T, T + H), False),
        # Far apart.
        ((T + 5 * H, T + 6 * H), (T, T + H), False),
    ],
)
def test_violates_cooldown(existing, candidate, expected):
    assert violates_cooldown(existing[0], existing[1], candidate[0], candidate[1]) is expected


def test_cooldown_is_mutual_for_adjacent_reservations():
    """Back-to-back reservations are flagged whichever one is the candidate."""

    first = (T, T + H)
    second = (T + H + 5 * M, T + 2 * H)
    assert violates_cooldown(*first, *second)
    assert violates_cooldown(*second, *first)


def test_custom_cooldown_length():
    assert not violates_cooldown(T - H, T - 5 * M, T, T + H, cooldown=timedelta(minutes=5))
    assert violates_cooldown(T - H, T - 5 * M, T, T + H, cooldown=COOLDOWN)


def test_haversine_zero_and_known_distance():
    assert haversine_km(3.15, 101.7, 3.15, 101.7) == 0
    # One degree of longitude along the equator.
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.195, abs=0.01)
    assert haversine_km(0, 0, 0, 1) == pytest.approx(haversine_km(0, 1, 0, 0))
