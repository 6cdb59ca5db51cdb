"""
Error envelope middleware - Standardize error responses outside the
analytics blueprint.

The analytics blueprint answers its own failures with {"error": message}
(404 for an empty result, 500 for a data-service failure). Everything else
(unknown paths, wrong methods, unexpected exceptions) gets:

{
    "error": {
        "code": "NOT_FOUND",
        "message": "The requested URL was not found on the server.",
        "requestId": "uuid"
    }
}
"""

import logging
from flask import Flask, jsonify, g
from werkzeug.exceptions import HTTPException


logger = logging.getLogger('api.middleware.error')


def _envelope(code: str, message: str):
    request_id = getattr(g, 'request_id', None)
    response = jsonify({
        "error": {
            "code": code,
            "message": message,
            "requestId": request_id,
        }
    })
    if request_id:
        response.headers['X-Request-ID'] = request_id
    return response


def setup_error_handlers(app: Flask) -> None:
    """
    Set up standardized error handlers on Flask app.

    Handles:
    - HTTP exceptions (404, 405, etc.) - keep their status code
    - Unhandled Python exceptions - 500 INTERNAL_ERROR

    Args:
        app: Flask application instance
    """

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # "Method Not Allowed" -> "METHOD_NOT_ALLOWED"
        code = error.name.upper().replace(' ', '_')
        return _envelope(code, error.description), error.code

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        if isinstance(error, HTTPException):
            return handle_http_error(error)

        logger.exception(
            f"Unhandled error: {error}",
            extra={
                "event": "unhandled_error",
                "request_id": getattr(g, 'request_id', None),
                "error_type": type(error).__name__,
            }
        )
        return _envelope("INTERNAL_ERROR", "An unexpected error occurred"), 500
