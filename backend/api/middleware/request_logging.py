"""
Request logging middleware - lightweight usage sampling.

Logs API requests with sampling and a path watchlist. Settings come from
the app config (REQUEST_LOG_ENABLED, REQUEST_LOG_SAMPLE_RATE,
REQUEST_LOG_ENDPOINTS), which config.Config reads from the environment.
"""

import logging
import random
import time
from typing import Iterable, List

from flask import Flask, g, request


logger = logging.getLogger("api.request")

# Liveness probes would drown everything else
EXCLUDED_PATHS = ("/api/health",)


def _parse_watchlist(raw) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [p.strip() for p in raw if p and p.strip()]


def _parse_sample_rate(raw) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def _should_log(path: str, watchlist: Iterable[str], sample_rate: float) -> bool:
    if watchlist:
        return any(path.startswith(prefix) for prefix in watchlist)
    if sample_rate <= 0:
        return False
    if sample_rate >= 1:
        return True
    return random.random() <= sample_rate


def setup_request_logging_middleware(app: Flask) -> None:
    """
    Set up request logging middleware on Flask app.

    Config keys:
      - REQUEST_LOG_ENABLED (default: True)
      - REQUEST_LOG_SAMPLE_RATE (default: 0.0)
      - REQUEST_LOG_ENDPOINTS (comma-separated path prefixes to always log)
    """
    if not app.config.get("REQUEST_LOG_ENABLED", True):
        return

    sample_rate = _parse_sample_rate(app.config.get("REQUEST_LOG_SAMPLE_RATE", 0.0))
    watchlist = _parse_watchlist(app.config.get("REQUEST_LOG_ENDPOINTS", ""))

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()

    @app.after_request
    def _log_request(response):
        path = request.path
        if not path.startswith("/api") or path in EXCLUDED_PATHS:
            return response

        if not _should_log(path, watchlist, sample_rate):
            return response

        duration_ms = None
        if hasattr(g, "request_start"):
            duration_ms = round((time.perf_counter() - g.request_start) * 1000, 2)

        logger.info(
            "api_request path=%s method=%s status=%s duration_ms=%s pages=%s request_id=%s query=%s",
            path,
            request.method,
            response.status_code,
            duration_ms,
            response.headers.get("X-Page-Count", 0),
            getattr(g, "request_id", None),
            request.query_string.decode("utf-8", "replace"),
        )
        return response
