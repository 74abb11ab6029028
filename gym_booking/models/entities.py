"""Dataclass-style entity representations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from flask_login import UserMixin


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class ConflictReason(str, Enum):
    """Why a candidate reservation was turned away."""

    MACHINE = "machine"
    INSTRUCTOR = "instructor"
    MACHINE_AND_INSTRUCTOR = "machine+instructor"
    COOLDOWN = "cooldown"


@dataclass
class User(UserMixin):
    """Gym member or administrator, compatible with Flask-Login."""

    user_id: int
    name: str
    email: str
    phone_number: Optional[str]
    password_hash: str
    role: str
    created_at: datetime

    def get_id(self) -> str:
        return str(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "role": self.role,
            "createdAt": _iso(self.created_at),
        }


@dataclass
class Instructor:
    """Coach who supervises a machine session."""

    instructor_id: int
    name: str
    email: str
    phone_number: Optional[str]
    rate_per_hour: float
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.instructor_id,
            "name": self.name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "ratePerHour": self.rate_per_hour,
            "createdAt": _iso(self.created_at),
        }


@dataclass
class Machine:
    """Workout machine placed at a fixed coordinate."""

    machine_id: int
    machine_type: str
    location: Optional[str]
    latitude: float
    longitude: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.machine_id,
            "machineType": self.machine_type,
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "description": self.description,
        }


@dataclass(frozen=True)
class Candidate:
    """Unpersisted reservation request awaiting an admission decision."""

    user_id: int
    machine_id: int
    instructor_id: int
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class Reservation:
    """Confirmed booking of a machine and an instructor for a time window."""

    reservation_id: int
    user_id: int
    machine_id: int
    instructor_id: int
    start_time: datetime
    end_time: datetime
    status: str = "confirmed"
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.reservation_id,
            "userId": self.user_id,
            "machineId": self.machine_id,
            "instructorId": self.instructor_id,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "status": self.status,
        }
        if self.created_at is not None:
            payload["createdAt"] = _iso(self.created_at)
        return payload
