from flask import Flask, jsonify
from flask_cors import CORS
import logging
import os
from logging.handlers import RotatingFileHandler

from sse_relay.config import ConfigManager
from sse_relay.api.schemas.base import ErrorResponse

__version__ = "0.1.0"

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def configure_logging(log_config, app_logger=None):
    """Attach a rotating file handler to the package logger (and the app logger)."""
    package_logger = logging.getLogger("sse_relay")
    level = logging.getLevelName(log_config.level)

    # Replace the handler left by an earlier create_app in this process
    for handler in list(package_logger.handlers):
        if getattr(handler, "sse_relay_file_handler", False):
            package_logger.removeHandler(handler)
            handler.close()

    if not os.path.exists(log_config.log_dir):
        os.makedirs(log_config.log_dir, exist_ok=True)

    file_handler = RotatingFileHandler(
        os.path.join(log_config.log_dir, "sse_relay.log"),
        maxBytes=log_config.max_bytes,
        backupCount=log_config.backup_count,
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(level)
    file_handler.sse_relay_file_handler = True
    package_logger.addHandler(file_handler)
    package_logger.setLevel(level)

    if app_logger is not None:
        app_logger.setLevel(level)
        if file_handler not in app_logger.handlers:
            app_logger.addHandler(file_handler)


def create_app(config: ConfigManager = None, start_background: bool = False):
    if config is None:
        config = ConfigManager()

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config["SSE_RELAY"] = config

    configure_logging(config.logging, app.logger)
    app.logger.info("SSE Relay Startup")

    # Every response, streams included, may be read cross-origin
    origins = config.server.cors_origins
    CORS(
        app,
        origins=origins,
        send_wildcard=origins == "*",
        allow_headers=["Cache-Control", "Content-Type"],
    )

    from sse_relay.services.event_service import EventService

    service = EventService.from_config(config)
    app.extensions["event_service"] = service
    if start_background and config.generator.enabled:
        service.start_background()

    # Register blueprints
    from sse_relay.api.routes.stream import stream_bp
    from sse_relay.api.routes.control import control_bp
    from sse_relay.api.routes.system import system_bp

    app.register_blueprint(stream_bp)
    app.register_blueprint(control_bp)
    app.register_blueprint(system_bp)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(ErrorResponse(error_code="NOT_FOUND", message="not found").model_dump()), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return (
            jsonify(ErrorResponse(error_code="METHOD_NOT_ALLOWED", message=str(e)).model_dump()),
            405,
        )

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f"[API] Unhandled error: {getattr(e, 'original_exception', e)}")
        return (
            jsonify(ErrorResponse(error_code="INTERNAL_ERROR", message="internal server error").model_dump()),
            500,
        )

    return app
