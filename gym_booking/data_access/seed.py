"""Deterministic seed data for the gym booking API."""

from __future__ import annotations

from .db import execute, get_db
from .users_dao import hash_password

DEMO_PASSWORD = "password123"

USERS = [
    ("Alice", "alice@example.com", "1111111111", "admin"),
    ("Bob", "bob@example.com", "2222222222", "user"),
    ("Charlie", "charlie@example.com", "3333333333", "user"),
]

INSTRUCTORS = [
    ("Coach Alex", "alex@fit.com", "4444444444", 100),
    ("Coach Mira", "mira@fit.com", "5555555555", 120),
    ("Coach Sam", "sam@fit.com", "6666666666", 110),
    ("Coach Lily", "lily@fit.com", "7777777777", 130),
    ("Coach John", "john@fit.com", "8888888888", 90),
]

MACHINES = [
    ("Treadmill", "Zone A", 3.15, 101.7, "High-speed treadmill"),
    ("Elliptical", "Zone B", 3.151, 101.702, "Low-impact elliptical"),
    ("Rowing Machine", "Zone C", 3.1495, 101.699, "Water resistance rower"),
    ("Stationary Bike", "Zone D", 3.152, 101.703, "Upright cardio bike"),
    ("Stair Climber", "Zone E", 3.153, 101.704, "Leg endurance trainer"),
]


def seed() -> None:
    """Populate the database with demo users, instructors and machines."""

    db = get_db()
    password_hash = hash_password(DEMO_PASSWORD)

    for name, email, phone_number, role in USERS:
        execute(
            db,
            """
            INSERT OR IGNORE INTO users (name, email, phone_number, password_hash, role)
            VALUES (?, ?, ?, ?, ?)
            """,
            (name, email, phone_number, password_hash, role),
        )

    for name, email, phone_number, rate in INSTRUCTORS:
        execute(
            db,
            """
            INSERT OR IGNORE INTO instructors (name, email, phone_number, rate_per_hour)
            VALUES (?, ?, ?, ?)
            """,
            (name, email, phone_number, rate),
        )

    if db.execute("SELECT COUNT(*) FROM machines").fetchone()[0] == 0:
        for machine_type, location, latitude, longitude, description in MACHINES:
            execute(
                db,
                """
                INSERT INTO machines (machine_type, location, latitude, longitude, description)
                VALUES (?, ?, ?, ?, ?)
                """,
                (machine_type, location, latitude, longitude, description),
            )


if __name__ == "__main__":
    from flask import Flask

    app = Flask(__name__)
    app.config.from_mapping(DATABASE_URL="sqlite:///gym_booking.db")
    with app.app_context():
        seed()
    print("Seed data applied.")
