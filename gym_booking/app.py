"""Application factory for the gym booking API."""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from flask_login import LoginManager
from werkzeug.exceptions import HTTPException

from .config import BaseConfig, get_config
from .controllers.auth import user_for_token
from .controllers.bookings import LOCKS_EXTENSION
from .data_access.db import init_app as init_db_app
from .models.entities import User
from .services.admission import ResourceLockRegistry

login_manager = LoginManager()


@login_manager.request_loader
def load_user_from_request(req) -> User | None:
    """Resolve ``Authorization: Bearer <token>`` to a user."""

    header = req.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return user_for_token(header[len("Bearer ") :].strip())


def create_app(config_object: type[BaseConfig] | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    config_cls = config_object or get_config()
    app.config.from_object(config_cls)
    logging.getLogger("gym_booking").setLevel(app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    login_manager.init_app(app)
    init_db_app(app)
    app.extensions[LOCKS_EXTENSION] = ResourceLockRegistry()

    register_blueprints(app)
    register_error_handlers(app)

    @app.route("/")
    def index() -> str:
        """Health check."""

        return "API is running!"

    return app


def register_blueprints(app: Flask) -> None:
    """Import and register application blueprints."""

    from .controllers import (  # pylint: disable=import-outside-toplevel
        auth,
        bookings,
        instructors,
        machines,
        users,
    )

    app.register_blueprint(auth.bp)
    app.register_blueprint(bookings.bp)
    app.register_blueprint(machines.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(instructors.bp)


def register_error_handlers(app: Flask) -> None:
    """Render HTTP errors as JSON bodies."""

    messages = {
        400: "Bad request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not found",
        405: "Method not allowed",
    }

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        message = messages.get(error.code or 500, error.name)
        return jsonify({"error": message}), error.code

    @app.errorhandler(500)
    def server_error(error: Exception):
        original = getattr(error, "original_exception", None) or error
        app.logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=original)
        return jsonify({"error": "Internal server error"}), 500
