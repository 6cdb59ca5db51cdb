"""
Flask Application Factory - Tenant Assistant KPI Backend

Read-only aggregation over the remote data service. Every request fetches
what it needs (paginated, independent tables in parallel), aggregates in
memory and returns JSON. Nothing is cached and nothing is written.

All dashboard endpoints live on the analytics blueprint at /api.
"""

import logging
import os

from flask import Flask
from flask_cors import CORS

from config import Config, DataSourceConfig


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(config=None, source=None):
    """
    Build the Flask app.

    Args:
        config: Optional Flask config object/mapping (defaults to Config)
        source: Optional page source. Defaults to a DataServiceClient built
            from DataSourceConfig.from_env(); tests inject an in-memory one.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config is not None:
        if isinstance(config, dict):
            app.config.update(config)
        else:
            app.config.from_object(config)

    # Keep assembler key order in JSON responses
    app.json.sort_keys = False

    if not app.config.get("TESTING"):
        _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize CORS - read-only dashboard API, any origin
    CORS(app,
         resources={r"/api/*": {"origins": "*"}},
         methods=["GET", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
         expose_headers=["X-Request-ID", "X-Source-Time-Ms", "X-Page-Count"],
         supports_credentials=False,
         send_wildcard=True)  # Always send '*' instead of echoing Origin header

    # === MIDDLEWARE ===
    # Order matters: request id first (others read g.request_id); request
    # logging before fetch timing so its after_request sees X-Page-Count.
    from api.middleware import (
        setup_error_handlers,
        setup_fetch_timing_middleware,
        setup_request_id_middleware,
        setup_request_logging_middleware,
    )
    setup_request_id_middleware(app)
    setup_request_logging_middleware(app)
    setup_fetch_timing_middleware(app)
    setup_error_handlers(app)

    # === DATA SOURCE ===
    if source is None:
        from services.data_source import DataServiceClient
        source = DataServiceClient(DataSourceConfig.from_env())
    app.extensions['data_source'] = source

    # Register routes
    # Analytics routes (PUBLIC - no authentication required)
    from routes.analytics import analytics_bp
    app.register_blueprint(analytics_bp, url_prefix='/api')

    return app


def run_app():
    """Main entry point for local development - starts server with Flask's dev server."""
    print("=" * 60)
    print("Starting Flask API - Tenant Assistant KPI Backend")
    print("=" * 60)

    app = create_app()
    source = app.extensions['data_source']
    print(f"   Data service: {getattr(source, 'config', None) and source.config.base_url}")
    print(f"   Page size: {source.page_size}, parallel fetches: {source.max_workers}")
    print("=" * 60)

    port = int(os.getenv("PORT", "5000"))
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=port)


if __name__ == "__main__":
    run_app()
