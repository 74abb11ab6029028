"""HTTP tests for the booking endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest

from gym_booking.services.errors import StorageUnavailable

from conftest import T

H = timedelta(hours=1)
M = timedelta(minutes=1)


def _payload(machine_id=2, instructor_id=2, start=T, end=None, user_id=1) -> dict:
    return {
        "userId": user_id,
        "machineId": machine_id,
        "instructorId": instructor_id,
        "startTime": start.isoformat().replace("+00:00", "Z"),
        "endTime": (end or start + H).isoformat().replace("+00:00", "Z"),
    }


def test_successful_booking(client):
    response = client.post("/bookings", json=_payload())

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["booking"]["status"] == "confirmed"
    assert body["booking"]["startTime"] == "2030-04-17T15:00:00Z"


@pytest.mark.parametrize(
    "machine_id, instructor_id, reason",
    [(2, 2, "machine+instructor"), (2, 3, "machine"), (3, 2, "instructor")],
)
def test_conflicting_booking_returns_409(client, machine_id, instructor_id, reason):
    first = client.post("/bookings", json=_payload()).get_json()["booking"]

    response = client.post("/bookings", json=_payload(machine_id, instructor_id))

    assert response.status_code == 409
    body = response.get_json()
    assert body["reason"] == reason
    assert body["conflictBookingId"] == first["id"]
    assert body["error"] == "Time slot conflicts with existing booking"


def test_cooldown_booking_returns_409(client):
    first = client.post("/bookings", json=_payload()).get_json()["booking"]

    response = client.post("/bookings", json=_payload(2, 4, start=T + H + 5 * M, end=T + 2 * H))

    assert response.status_code == 409
    assert response.get_json()["reason"] == "cooldown"
    assert response.get_json()["conflictBookingId"] == first["id"]

    later = client.post(
        "/bookings",
        json=_payload(2, 4, start=T + H + 10 * M + timedelta(seconds=1), end=T + 2 * H),
    )
    assert later.status_code == 200


@pytest.mark.parametrize(
    "payload",
    [
        {"machineId": 2, "instructorId": 2, "startTime": "2030-04-17T15:00:00Z", "endTime": "2030-04-17T16:00:00Z"},
        {**_payload(), "startTime": "yesterday"},
        {**_payload(), "machineId": "two"},
        {**_payload(), "instructorId": 0},
        {**_payload(), "userId": None},
        {**_payload(), "machineId": {"id": 2}},
        {**_payload(), "machineId": 2.9},
        {**_payload(), "machineId": True},
        {**_payload(), "startTime": "0001-01-01T00:05:00Z", "endTime": "0001-01-01T01:00:00Z"},
        {**_payload(), "startTime": "9999-12-31T22:00:00Z", "endTime": "9999-12-31T23:55:00Z"},
    ],
)
def test_malformed_payload_returns_400(client, payload):
    response = client.post("/bookings", json=payload)
    assert response.status_code == 400
    assert "error" in response.get_json()
    assert client.get("/bookings").get_json() == []


def test_digit_string_ids_are_accepted(client):
    response = client.post("/bookings", json={**_payload(), "machineId": "3"})
    assert response.status_code == 200
    assert response.get_json()["booking"]["machineId"] == 3


def test_non_chronological_interval_returns_400(client):
    response = client.post("/bookings", json=_payload(start=T, end=T))
    assert response.status_code == 400
    assert "after start" in response.get_json()["error"]


def test_unknown_machine_returns_400(client):
    response = client.post("/bookings", json=_payload(machine_id=42))
    assert response.status_code == 400


def test_non_object_body_returns_400(client):
    response = client.post("/bookings", json=[1, 2, 3])
    assert response.status_code == 400


def test_naive_timestamps_are_utc(client):
    payload = _payload()
    payload["startTime"] = "2030-04-17T15:00:00"
    payload["endTime"] = "2030-04-17T16:00:00"
    response = client.post("/bookings", json=payload)
    assert response.status_code == 200
    assert response.get_json()["booking"]["endTime"] == "2030-04-17T16:00:00Z"


def test_storage_outage_returns_503(client, monkeypatch):
    from gym_booking.data_access import bookings_dao

    def unavailable(self, machine_id=None, instructor_id=None):
        raise StorageUnavailable("database is locked")

    monkeypatch.setattr(bookings_dao.SqliteReservationRepository, "find_reservations_for_resource", unavailable)

    response = client.post("/bookings", json=_payload())

    assert response.status_code == 503
    assert client.get("/bookings").get_json() == []


def test_list_bookings_embeds_related_records(client):
    client.post("/bookings", json=_payload(3, 3, start=T + 3 * H))
    client.post("/bookings", json=_payload(2, 2))

    response = client.get("/bookings")

    assert response.status_code == 200
    bookings = response.get_json()
    assert [b["machineId"] for b in bookings] == [2, 3]
    assert bookings[0]["user"]["email"] == "alice@example.com"
    assert "passwordHash" not in bookings[0]["user"]
    assert bookings[0]["instructor"]["name"] == "Coach Mira"
    assert bookings[0]["machine"]["machineType"] == "Elliptical"
