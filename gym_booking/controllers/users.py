"""User administration routes."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ..data_access import users_dao
from .auth import role_required

bp = Blueprint("users", __name__, url_prefix="/users")


@bp.route("", methods=["GET"])
@role_required("admin")
def list_users():
    """List every account. Admins only."""

    return jsonify([user.to_dict() for user in users_dao.list_users()])
