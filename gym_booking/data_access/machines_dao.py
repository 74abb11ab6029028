"""Data access helpers for workout machines."""

from __future__ import annotations

from ..models.entities import Machine
from .db import get_db, query_all, query_one


def _row_to_machine(row) -> Machine:
    return Machine(
        machine_id=row["machine_id"],
        machine_type=row["machine_type"],
        location=row["location"],
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        description=row["description"] or "",
    )


def get_machine_by_id(machine_id: int, connection=None) -> Machine | None:
    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM machines WHERE machine_id = ?",
        (machine_id,),
    )
    return _row_to_machine(row) if row else None


def list_machines(connection=None) -> list[Machine]:
    """Return every machine ordered by id."""

    db = connection or get_db()
    rows = query_all(db, "SELECT * FROM machines ORDER BY machine_id ASC")
    return [_row_to_machine(row) for row in rows]
