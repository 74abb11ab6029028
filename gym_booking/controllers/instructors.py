"""Instructor directory routes."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from ..data_access import instructors_dao

bp = Blueprint("instructors", __name__, url_prefix="/instructors")


@bp.route("", methods=["GET"])
@login_required
def list_instructors():
    """Return the full instructor list to signed-in users."""

    return jsonify([instructor.to_dict() for instructor in instructors_dao.list_instructors()])
