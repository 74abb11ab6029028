"""Shared pytest fixtures."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from itertools import count
from pathlib import Path
import sys
import threading
import time
from typing import Generator, Iterator, Optional

import pytest
from flask import Flask

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gym_booking.app import create_app
from gym_booking.config import TestingConfig
from gym_booking.data_access import seed, users_dao
from gym_booking.data_access.db import get_db, init_db
from gym_booking.models.entities import Candidate, Instructor, Machine, Reservation, User

T = datetime(2030, 4, 17, 15, 0, tzinfo=timezone.utc)


class _TestConfig(TestingConfig):
    DATABASE_URL: str = ""


class InMemoryReservationRepository:
    """Reservation repository fake backed by plain lists.

    ``transaction()`` is a no-op so only the admission locks guard against
    races. ``read_delay`` widens the check-then-insert window and
    ``fail_inserts`` queues exceptions raised by the next inserts.
    """

    def __init__(self, machines=(1, 2, 3, 4, 5), instructors=(1, 2, 3, 4, 5), users=(1, 2, 3)) -> None:
        created = datetime(2030, 1, 1, tzinfo=timezone.utc)
        self.machines = {
            machine_id: Machine(machine_id, "Treadmill", None, 3.15, 101.7, "") for machine_id in machines
        }
        self.instructors = {
            instructor_id: Instructor(instructor_id, f"Coach {instructor_id}", f"c{instructor_id}@fit.com", None, 100, created)
            for instructor_id in instructors
        }
        self.users = {user_id: User(user_id, f"User {user_id}", f"u{user_id}@example.com", None, "x", "user", created) for user_id in users}
        self.reservations: list[Reservation] = []
        self.calls: list[str] = []
        self.read_delay = 0.0
        self.fail_inserts: list[Exception] = []
        self._ids = count(1)
        self._guard = threading.Lock()

    def add(self, machine_id: int, instructor_id: int, start: datetime, end: datetime, user_id: int = 1) -> Reservation:
        reservation = Reservation(next(self._ids), user_id, machine_id, instructor_id, start, end)
        self.reservations.append(reservation)
        return reservation

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.calls.append("transaction")
        yield

    def get_user(self, user_id: int) -> Optional[User]:
        self.calls.append("get_user")
        return self.users.get(user_id)

    def get_machine(self, machine_id: int) -> Optional[Machine]:
        self.calls.append("get_machine")
        return self.machines.get(machine_id)

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:
        self.calls.append("get_instructor")
        return self.instructors.get(instructor_id)

    def find_reservations_for_resource(self, machine_id=None, instructor_id=None) -> list[Reservation]:
        self.calls.append("find")
        with self._guard:
            found = [
                r for r in self.reservations if r.machine_id == machine_id or r.instructor_id == instructor_id
            ]
        if self.read_delay:
            time.sleep(self.read_delay)
        # Newest first, so callers cannot rely on storage order.
        return list(reversed(found))

    def insert_reservation(self, candidate: Candidate) -> Reservation:
        self.calls.append("insert")
        if self.fail_inserts:
            raise self.fail_inserts.pop(0)
        with self._guard:
            return self.add(
                candidate.machine_id,
                candidate.instructor_id,
                candidate.start_time,
                candidate.end_time,
                user_id=candidate.user_id,
            )

    def list_machines_with_reservations_in_window(self, start, end, cooldown):
        self.calls.append("list_machines")
        return [
            (machine, [r for r in self.reservations if r.machine_id == machine.machine_id])
            for machine in self.machines.values()
        ]


def candidate(
    machine_id: int = 2,
    instructor_id: int = 2,
    start: datetime = T,
    end: Optional[datetime] = None,
    user_id: int = 1,
) -> Candidate:
    return Candidate(user_id, machine_id, instructor_id, start, end or start + timedelta(hours=1))


@pytest.fixture()
def repo() -> InMemoryReservationRepository:
    return InMemoryReservationRepository()


@pytest.fixture()
def app(tmp_path: Path) -> Generator[Flask, None, None]:
    """Configure a Flask application for testing with a temp SQLite database."""

    db_path = tmp_path / "test.db"
    _TestConfig.DATABASE_URL = f"sqlite:///{db_path}"
    application = create_app(_TestConfig)
    with application.app_context():
        init_db(application)
        seed.seed()
    yield application


@pytest.fixture()
def client(app: Flask):
    """Flask test client."""

    return app.test_client()


@pytest.fixture()
def runner(app: Flask):
    """Flask CLI runner."""

    return app.test_cli_runner()


@pytest.fixture()
def db(app: Flask):
    """Provide a database connection for direct queries."""

    with app.app_context():
        yield get_db()


@pytest.fixture()
def admin_user(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("alice@example.com")


@pytest.fixture()
def regular_user(app: Flask):
    with app.app_context():
        return users_dao.get_user_by_email("bob@example.com")


def login(client, email: str, password: str = seed.DEMO_PASSWORD) -> dict:
    """Return Authorization headers for a seeded account."""

    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return {"Authorization": f"Bearer {response.get_json()['token']}"}
