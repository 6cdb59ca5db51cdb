"""
Shared route utilities for analytics endpoints.

Goals:
- Structured logger usage for timing and errors
- Keep endpoint handlers small and consistent: parse filters, run the
  registered assembler, serialize
"""

import time
import logging
from typing import Any, Dict, Optional

from flask import current_app, jsonify, request

from services.filters import DashboardFilters
from services.kpi import NoDataError, run_endpoint

DATA_SOURCE_EXTENSION = 'data_source'


def route_logger(name: str) -> logging.Logger:
    """Return namespaced logger for analytics routes."""
    return logging.getLogger(f"analytics.{name}")


def elapsed_ms(start_time: float) -> int:
    """Return elapsed milliseconds since a perf_counter() start value."""
    return int((time.perf_counter() - start_time) * 1000)


def log_success(
    logger: logging.Logger,
    route: str,
    start_time: float,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.info("route_success %s", payload)


def log_error(
    logger: logging.Logger,
    route: str,
    start_time: float,
    err: Exception,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.exception("route_error %s err=%s", payload, err)


def get_source():
    """The page source injected by create_app()."""
    return current_app.extensions[DATA_SOURCE_EXTENSION]


def parse_filters() -> DashboardFilters:
    """Dashboard filters from the current request's query string."""
    return DashboardFilters.from_params(request.args)


def respond(endpoint_id: str, route: str, **options):
    """
    Run a registered assembler for the current request and return JSON.

    NoDataError and data-source errors propagate to the blueprint's error
    handlers (404 / 500); failures are logged here with the filters applied.
    """
    logger = route_logger(route)
    start = time.perf_counter()
    filters = parse_filters()
    details = {"filters": filters.to_log_dict()}

    try:
        payload = run_endpoint(endpoint_id, get_source(), filters, **options)
    except NoDataError:
        raise
    except Exception as e:
        log_error(logger, route, start, e, details)
        raise

    log_success(logger, route, start, details)
    return jsonify(payload)
