"""Error handlers rendering every failure as the standard JSON envelope."""
from __future__ import annotations
import logging
import traceback

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException, NotFound

from kada_connect.core.errors import ApiError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def _show_stack() -> bool:
    """Stack traces are exposed outside production only."""
    cfg = current_app.config.get("APP_CONFIG")
    return not (cfg is not None and cfg.is_production)


def _envelope(message: str, status: int, error: Exception | None = None):
    """The message always reaches the client; the stack only outside production."""
    payload = {"success": False, "message": message, "data": None}
    if error is not None and _show_stack():
        payload["stack"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return jsonify(payload), status


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        """Handle errors raised deliberately by route handlers and services."""
        if error.status >= 500:
            app.logger.error(f"{error.status} - {error.message}", exc_info=error)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.path, error.status, error.message)
        return _envelope(error.message, error.status, error)

    @app.errorhandler(404)
    def not_found(error):
        """Handle unmatched routes."""
        return _envelope(f"Not Found - {request.path}", 404)

    @app.errorhandler(413)
    def payload_too_large(error):
        return _envelope("Request payload exceeds maximum allowed size", 413, error)

    @app.errorhandler(429)
    def too_many_requests(error):
        logger.warning("Rate limit exceeded for %s on %s (%s)", request.remote_addr, request.path, error.description)
        return _envelope(RATE_LIMIT_MESSAGE, 429, error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Pass through other HTTP errors (405, 400 from body parsing...) as envelopes."""
        if isinstance(error, NotFound):
            return not_found(error)
        return _envelope(error.description or error.name, error.code or 500, error)

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # ALWAYS log the full error (even in production) - logs are not client-facing
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return _envelope(str(error) or "Internal Server Error", 500, error)
