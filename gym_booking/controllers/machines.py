"""Machine discovery routes."""

from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request
from flask_wtf import FlaskForm
from wtforms import FloatField, IntegerField
from wtforms.validators import InputRequired, NumberRange, Optional

from ..data_access import bookings_dao
from ..data_access.db import get_db
from ..services.availability import AvailabilityQuery, find_available_machines
from ..services.errors import InvalidInput, StorageUnavailable
from .bookings import IsoDateTimeField

bp = Blueprint("machines", __name__, url_prefix="/machines")


class AvailabilityForm(FlaskForm):
    """Query-string filters for the nearest available machines."""

    page = IntegerField("Page", default=1, validators=[Optional(), NumberRange(min=1)])
    limit = IntegerField("Limit", validators=[Optional(), NumberRange(min=1)])
    lat = FloatField("Latitude", validators=[InputRequired(), NumberRange(min=-90, max=90)])
    lng = FloatField("Longitude", validators=[InputRequired(), NumberRange(min=-180, max=180)])
    startTime = IsoDateTimeField("Start", validators=[InputRequired()])
    endTime = IsoDateTimeField("End", validators=[InputRequired()])


@bp.route("", methods=["GET"])
def list_machines():
    """Return the nearest machines free during the requested window, one page at a time."""

    form = AvailabilityForm(formdata=request.args)
    if not form.validate():
        return jsonify({"error": form.errors}), 400

    max_page_size = current_app.config["MACHINES_MAX_PAGE_SIZE"]
    limit = form.limit.data or current_app.config["MACHINES_DEFAULT_PAGE_SIZE"]
    query = AvailabilityQuery(
        start_time=form.startTime.data,
        end_time=form.endTime.data,
        lat=form.lat.data,
        lng=form.lng.data,
        page=form.page.data or 1,
        limit=min(limit, max_page_size),
    )
    try:
        result = find_available_machines(
            bookings_dao.SqliteReservationRepository(get_db()),
            query,
            cooldown=timedelta(minutes=current_app.config["BOOKING_COOLDOWN_MINUTES"]),
            max_page_size=max_page_size,
        )
    except InvalidInput as exc:
        return jsonify({"error": str(exc)}), 400
    except StorageUnavailable:
        current_app.logger.warning("Storage unavailable while listing machines")
        return jsonify({"error": "Machine storage is temporarily unavailable"}), 503
    return jsonify(result.to_dict())
