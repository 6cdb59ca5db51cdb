"""
KPI Services Package

Standardized endpoint assembly with:
- One file per endpoint (thin composition of the shared services)
- Explicit registry order
- NoDataError for empty filtered result sets

Usage:
    from services.kpi import run_endpoint

    payload = run_endpoint("summary", source, filters)
"""

from services.kpi.registry import (
    run_endpoint,
    get_spec,
    list_enabled_endpoints,
    ENABLED_ENDPOINTS,
    ENDPOINT_ORDER,
)

from services.kpi.base import (
    AssemblerSpec,
    NoDataError,
    events_request,
    load_events,
    require_rows,
)

__all__ = [
    'run_endpoint',
    'get_spec',
    'list_enabled_endpoints',
    'ENABLED_ENDPOINTS',
    'ENDPOINT_ORDER',
    'AssemblerSpec',
    'NoDataError',
    'events_request',
    'load_events',
    'require_rows',
]
