"""
Global middleware for API requests.

Provides:
- Request ID injection (X-Request-ID)
- Error envelope standardization
- Fetch timing instrumentation (X-Source-Time-Ms, X-Page-Count)
- Request usage logging (sampling + watchlist)
"""

from .request_id import setup_request_id_middleware
from .error_envelope import setup_error_handlers
from .fetch_timing import setup_fetch_timing_middleware
from .request_logging import setup_request_logging_middleware

__all__ = [
    'setup_request_id_middleware',
    'setup_error_handlers',
    'setup_fetch_timing_middleware',
    'setup_request_logging_middleware',
]
