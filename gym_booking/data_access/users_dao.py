"""Data access helpers for the users table."""

from __future__ import annotations

import bcrypt

from ..models.entities import User
from .db import get_db, parse_timestamp, query_all, query_one


def _row_to_user(row) -> User:
    return User(
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        phone_number=row["phone_number"],
        password_hash=row["password_hash"],
        role=row["role"],
        created_at=parse_timestamp(row["created_at"]),
    )


def hash_password(password: str) -> str:
    """Return a bcrypt hash suitable for the password_hash column."""

    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def get_user_by_id(user_id: int, connection=None) -> User | None:
    """Fetch a user by primary key."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM users WHERE user_id = ?",
        (user_id,),
    )
    return _row_to_user(row) if row else None


def get_user_by_email(email: str) -> User | None:
    """Fetch a user by unique email address."""

    db = get_db()
    row = query_one(
        db,
        "SELECT * FROM users WHERE email = ?",
        (email,),
    )
    return _row_to_user(row) if row else None


def list_users() -> list[User]:
    """Return every user ordered by id."""

    db = get_db()
    rows = query_all(db, "SELECT * FROM users ORDER BY user_id ASC")
    return [_row_to_user(row) for row in rows]


def verify_password(stored_hash: str, candidate: str) -> bool:
    """Compare a stored hash against a candidate password."""

    if not stored_hash:
        return False
    return bcrypt.checkpw(candidate.encode("utf-8"), stored_hash.encode("utf-8"))
