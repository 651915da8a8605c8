# storefront/utils/error_handlers.py
"""
Centralized Flask error handlers.
Keeps routes.py files clean and guarantees consistent JSON responses.
"""
from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException

from storefront.utils.logging import get_logger
from storefront.utils.exceptions import StorefrontError

log = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(StorefrontError)
    def handle_storefront_error(error: StorefrontError) -> tuple[Response, int]:
        log.warning("%s: %s | payload=%s", type(error).__name__, error.message, error.payload)
        response = {"error": error.message, "details": error.payload}
        return jsonify(response), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException) -> tuple[Response, int]:
        if error.code == 500:
            return internal_error(error)
        name = (error.name or "error").lower().replace(" ", "_")
        return jsonify(error=name, message=error.description), error.code or 500

    @app.errorhandler(500)
    def internal_error(error: Exception) -> tuple[Response, int]:
        original = getattr(error, "original_exception", None) or error
        log.error("Unhandled exception: %r", original, exc_info=original)
        return jsonify(error="internal_server_error"), 500

    log.info("Error handlers registered")
