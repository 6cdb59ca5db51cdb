"""
Request ID middleware - Inject X-Request-ID for request correlation.

The same id tags the fetch timing and request log lines of the request.
"""

import uuid
from flask import Flask, request, g

REQUEST_ID_HEADER = 'X-Request-ID'


def setup_request_id_middleware(app: Flask) -> None:
    """
    Set up request ID middleware on Flask app.

    Injects X-Request-ID into:
    - Flask's g object (g.request_id)
    - Response headers (X-Request-ID)

    Must be registered before the other middleware so their before_request
    hooks can read g.request_id.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def inject_request_id():
        # Honour an upstream id (proxy / dashboard), otherwise generate one
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

    @app.after_request
    def add_request_id_header(response):
        if hasattr(g, 'request_id'):
            response.headers[REQUEST_ID_HEADER] = g.request_id
        return response


def get_request_id() -> str:
    """Current request ID, or a fresh UUID outside a request."""
    if hasattr(g, 'request_id'):
        return g.request_id
    return str(uuid.uuid4())
