"""
Fetch timing middleware - Lightweight data-service timing for observability.

Captures:
- Page request time (source_time_ms)
- Page request count per request
- Correlates with request_id

Pages are fetched from worker threads (services.fetcher.fetch_tables), so the
per-request accumulator lives in a ContextVar that the fetcher copies into
each worker, not in thread-local storage.

Log format:
    SLOW_PAGE request_id=<uuid> table=<name> elapsed_ms=<float> rows=<int>
    REQUEST_TIMING request_id=<uuid> source_time_ms=<float> page_count=<int>
"""

import logging
import threading
from contextvars import ContextVar
from typing import Optional

from flask import Flask, g

from services.data_source import add_page_listener

logger = logging.getLogger('fetch_timing')

# Configuration
SLOW_PAGE_THRESHOLD_MS = 500  # Log pages slower than this
REQUEST_TIMING_LOG_MS = 200


class _RequestTiming:
    """Page timings of one HTTP request (shared by its worker threads)."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        self.pages = []
        self._lock = threading.Lock()

    def record(self, table: str, elapsed_ms: float, row_count: int) -> None:
        with self._lock:
            self.pages.append({
                'table': table,
                'elapsed_ms': round(elapsed_ms, 2),
                'rows': row_count,
            })


_current: ContextVar[Optional[_RequestTiming]] = ContextVar('fetch_timing', default=None)


def _on_page(table: str, elapsed_ms: float, row_count: int) -> None:
    timing = _current.get()
    if timing is None:
        return
    timing.record(table, elapsed_ms, row_count)

    if elapsed_ms > SLOW_PAGE_THRESHOLD_MS:
        logger.warning(
            f"SLOW_PAGE request_id={timing.request_id} table={table} "
            f"elapsed_ms={elapsed_ms:.2f} rows={row_count}"
        )


def setup_fetch_timing_middleware(app: Flask) -> None:
    """
    Set up fetch timing middleware on Flask app.

    Hooks into the data-service page listener to time all page requests.
    Injects timing headers into responses.

    Args:
        app: Flask application instance
    """
    add_page_listener(_on_page)

    @app.before_request
    def reset_fetch_timing():
        """Start a fresh accumulator for this request."""
        _current.set(_RequestTiming(_get_request_id()))

    @app.after_request
    def inject_timing_headers(response):
        """Add timing headers to response for observability."""
        timing = _current.get()
        if timing is None or not timing.pages:
            return response

        total_ms = sum(p['elapsed_ms'] for p in timing.pages)
        page_count = len(timing.pages)

        response.headers['X-Source-Time-Ms'] = str(round(total_ms, 2))
        response.headers['X-Page-Count'] = str(page_count)

        if total_ms > REQUEST_TIMING_LOG_MS:
            logger.info(
                f"REQUEST_TIMING request_id={timing.request_id} "
                f"source_time_ms={total_ms:.2f} page_count={page_count}"
            )

        return response


def _get_request_id() -> str:
    """Get current request ID from Flask context, or 'no-request-id' if unavailable."""
    return getattr(g, 'request_id', 'no-request-id')


def get_request_timing() -> dict:
    """
    Get timing data for current request.

    Returns:
        dict with total_source_ms, page_count, and individual page timings
    """
    timing = _current.get()
    pages = list(timing.pages) if timing else []
    return {
        'total_source_ms': sum(p['elapsed_ms'] for p in pages),
        'page_count': len(pages),
        'pages': pages,
    }
