"""Data access helpers for instructors."""

from __future__ import annotations

from ..models.entities import Instructor
from .db import get_db, parse_timestamp, query_all, query_one


def _row_to_instructor(row) -> Instructor:
    return Instructor(
        instructor_id=row["instructor_id"],
        name=row["name"],
        email=row["email"],
        phone_number=row["phone_number"],
        rate_per_hour=float(row["rate_per_hour"]),
        created_at=parse_timestamp(row["created_at"]),
    )


def get_instructor_by_id(instructor_id: int, connection=None) -> Instructor | None:
    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM instructors WHERE instructor_id = ?",
        (instructor_id,),
    )
    return _row_to_instructor(row) if row else None


def list_instructors() -> list[Instructor]:
    """Return all instructors ordered by id."""

    db = get_db()
    rows = query_all(db, "SELECT * FROM instructors ORDER BY instructor_id ASC")
    return [_row_to_instructor(row) for row in rows]
