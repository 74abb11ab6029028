"""Booking blueprint: list reservations and request new ones."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from flask import Blueprint, current_app, jsonify, request
from flask_wtf import FlaskForm
from wtforms import Field, IntegerField
from wtforms.validators import InputRequired, NumberRange

from ..data_access import bookings_dao
from ..data_access.db import get_db
from ..models.entities import Candidate
from ..services.admission import AdmissionController
from ..services.errors import (
    BookingRejected,
    ConstraintViolation,
    InvalidInput,
    StorageUnavailable,
)

bp = Blueprint("bookings", __name__, url_prefix="/bookings")

LOCKS_EXTENSION = "gym_booking.locks"


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant; a trailing ``Z`` is UTC and naive values are taken as UTC."""

    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class IsoDateTimeField(Field):
    """Timezone-aware datetime given as an ISO-8601 string."""

    def _value(self) -> str:
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist) -> None:
        if not valuelist:
            return
        try:
            self.data = parse_instant(valuelist[0])
        except (TypeError, ValueError) as exc:
            self.data = None
            raise ValueError(
                self.gettext("Invalid date format. Use ISO string (e.g. 2025-04-17T15:00:00Z)")
            ) from exc


class StrictIntegerField(IntegerField):
    """Integer given as a JSON integer or a string of digits.

    JSON bodies reach the form with their native types, so floats, booleans,
    nulls and nested objects are refused here instead of being coerced.
    """

    def process_formdata(self, valuelist) -> None:
        if not valuelist:
            return
        value = valuelist[0]
        if isinstance(value, int) and not isinstance(value, bool):
            self.data = value
        elif isinstance(value, str) and value.strip().isdecimal():
            self.data = int(value.strip())
        else:
            self.data = None
            raise ValueError(self.gettext("Not a valid integer value."))


class BookingRequestForm(FlaskForm):
    """Payload for a reservation request."""

    userId = StrictIntegerField("User", validators=[InputRequired(), NumberRange(min=1)])
    machineId = StrictIntegerField("Machine", validators=[InputRequired(), NumberRange(min=1)])
    instructorId = StrictIntegerField("Instructor", validators=[InputRequired(), NumberRange(min=1)])
    startTime = IsoDateTimeField("Start", validators=[InputRequired()])
    endTime = IsoDateTimeField("End", validators=[InputRequired()])


def admission_controller() -> AdmissionController:
    """Build an admission controller bound to this request's connection."""

    return AdmissionController(
        bookings_dao.SqliteReservationRepository(get_db()),
        locks=current_app.extensions[LOCKS_EXTENSION],
        cooldown=timedelta(minutes=current_app.config["BOOKING_COOLDOWN_MINUTES"]),
    )


@bp.route("", methods=["GET"])
def list_bookings():
    """List all bookings with their user, instructor and machine."""

    return jsonify(bookings_dao.list_bookings_with_details())


@bp.route("", methods=["POST"])
def create():
    """Admit a booking unless it conflicts with an existing one."""

    if not isinstance(request.get_json(silent=True), dict):
        return jsonify({"error": "Request body must be a JSON object."}), 400

    form = BookingRequestForm()
    if not form.validate_on_submit():
        return jsonify({"error": form.errors}), 400

    candidate = Candidate(
        user_id=form.userId.data,
        machine_id=form.machineId.data,
        instructor_id=form.instructorId.data,
        start_time=form.startTime.data,
        end_time=form.endTime.data,
    )
    current_app.logger.info(
        "New booking request user=%s machine=%s instructor=%s %s - %s",
        candidate.user_id,
        candidate.machine_id,
        candidate.instructor_id,
        candidate.start_time.isoformat(),
        candidate.end_time.isoformat(),
    )

    try:
        booking = admission_controller().admit(candidate)
    except InvalidInput as exc:
        return jsonify({"error": str(exc)}), 400
    except BookingRejected as exc:
        return (
            jsonify(
                {
                    "error": exc.message,
                    "reason": exc.reason.value,
                    "conflictBookingId": exc.conflict_booking_id,
                }
            ),
            409,
        )
    except ConstraintViolation:
        current_app.logger.warning("Booking insert refused by storage after retry")
        return jsonify({"error": "Time slot was taken by a concurrent booking", "reason": "constraint"}), 409
    except StorageUnavailable:
        current_app.logger.warning("Storage unavailable while admitting booking")
        return jsonify({"error": "Booking storage is temporarily unavailable"}), 503

    return jsonify({"success": True, "booking": booking.to_dict()})
