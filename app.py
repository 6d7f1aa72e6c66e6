"""Application factory."""

import json
import logging
import os
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.admin import admin_bp
from routes.users import users_bp
from services.auth import AuthService
from services.errors import ServiceError
from services.notifications import Mailer, Notifier
from services.verification import VerificationWorkflow

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Services
    _init_services(app)

    # Blueprints
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)

    # Service modules log under "services"; share the app's handlers.
    services_logger = logging.getLogger("services")
    services_logger.setLevel(level)
    for handler in app.logger.handlers:
        if handler not in services_logger.handlers:
            services_logger.addHandler(handler)


def _init_services(app: Flask) -> None:
    """Build the service objects from configuration values."""

    mailer = Mailer.from_config(app.config)
    notifier = Notifier(
        mailer,
        admin_email=app.config["ADMIN_EMAIL"],
        backend_url=app.config["BACKEND_URL"],
        frontend_url=app.config["FRONTEND_URL"],
    )
    app.extensions["mailer"] = mailer
    app.extensions["notifier"] = notifier
    app.extensions["verification_workflow"] = VerificationWorkflow(
        notifier,
        system_actor=app.config.get("VERIFICATION_ACTOR") or app.config["ADMIN_EMAIL"],
    )
    app.extensions["auth_service"] = AuthService(
        notifier,
        session_ttl=app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        reset_ttl=app.config["PASSWORD_RESET_TTL"],
        min_password_length=app.config.get("MIN_PASSWORD_LENGTH", 6),
    )


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "code": type(error).__name__,
            "detail": error.description,
            "request_id": request_id,
        }
        if isinstance(error, ServiceError):
            payload.update(error.payload)
            if error.code >= 500:
                app.logger.error("Service failure: %s", error.description)
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "error": "Internal Server Error",
            "code": "InternalServerError",
            "detail": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
