"""Authentication blueprint: token login and role checks."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import Blueprint, abort, current_app, jsonify
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from itsdangerous import BadSignature, URLSafeTimedSerializer
from wtforms import PasswordField, StringField
from wtforms.validators import InputRequired, Length

from ..data_access import users_dao
from ..models.entities import User

bp = Blueprint("auth", __name__)

ALLOWED_ROLES = ("user", "admin")
TOKEN_SALT = "gym-booking-auth"


class LoginForm(FlaskForm):
    """Credential payload for token issuance."""

    email = StringField("Email", validators=[InputRequired(), Length(max=255)])
    password = PasswordField("Password", validators=[InputRequired()])


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(user: User) -> str:
    """Sign the user id into a bearer token."""

    return _serializer().dumps({"uid": user.user_id})


def user_for_token(token: str) -> Optional[User]:
    """Resolve a bearer token to its user, or None when invalid or expired."""

    try:
        payload = _serializer().loads(token, max_age=current_app.config["AUTH_TOKEN_MAX_AGE"])
    except BadSignature:
        return None
    user_id = payload.get("uid") if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        return None
    return users_dao.get_user_by_id(user_id)


def role_required(*roles: str) -> Callable:
    """Decorator enforcing role-based access control."""

    allowed_roles = tuple(role for role in roles if role in ALLOWED_ROLES)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            if allowed_roles and current_user.role not in allowed_roles and not current_user.is_admin:
                abort(403)
            return view(*args, **kwargs)

        return wrapped

    return decorator


@bp.route("/login", methods=["POST"])
def login():
    """Exchange email and password for a bearer token."""

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": form.errors}), 400

    user = users_dao.get_user_by_email(form.email.data)
    if not user or not users_dao.verify_password(user.password_hash, form.password.data):
        current_app.logger.info("Failed login for %s", form.email.data)
        return jsonify({"error": "Invalid credentials"}), 401

    return jsonify({"token": issue_token(user)})
