"""
KPI Base Module - Shared infrastructure for all endpoint assemblers.

Core components:
- AssemblerSpec: one endpoint's id + assemble function
- NoDataError: the filtered result set is empty (-> 404, not a crash)
- load_events(): filtered fetch of the dashboard base view
- require_rows(): raise NoDataError on an empty set

Every assembler is a thin function:

    def assemble(source, filters: DashboardFilters) -> dict:
        events = require_rows(load_events(source, filters))
        ...compose services.metrics / breakdown / time_buckets / sla / sentiment...
        return {...}

Usage:
    from services.kpi.base import AssemblerSpec, NoDataError, load_events
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, TypeVar

from constants import BASE_VIEW, BASE_VIEW_DATE_COLUMN, BASE_VIEW_ORDER
from services.fetcher import TableRequest, fetch_records
from services.filters import DashboardFilters
from services.records import InquiryEvent

logger = logging.getLogger('kpi')

T = TypeVar('T')


# =============================================================================
# ERRORS
# =============================================================================

class NoDataError(Exception):
    """Filtered result set is empty. Not an error condition of the source."""

    def __init__(self, message: str = "No data found"):
        super().__init__(message)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class AssemblerSpec:
    """
    Endpoint assembler descriptor.

    Each file in services/kpi/ exports one of these as SPEC.
    """
    endpoint_id: str
    title: str
    assemble: Callable[..., Any]


# =============================================================================
# SHARED LOADERS
# =============================================================================

def events_request(filters: DashboardFilters, include_brand: bool = True) -> TableRequest:
    """
    TableRequest for inquiry events of the dashboard base view.

    Date range and brand are pushed down as source predicates; rows are
    ordered by (conversation, turn) so offset windows are stable.

    Args:
        filters: Dashboard filters
        include_brand: False to ignore the brand filter (cross-brand views)
    """
    predicates = filters.predicates(
        BASE_VIEW_DATE_COLUMN,
        brand_column='brand' if include_brand else None,
    )
    return TableRequest(
        BASE_VIEW, InquiryEvent, '*', predicates=tuple(predicates), order=BASE_VIEW_ORDER,
    )


def load_events(source, filters: DashboardFilters, include_brand: bool = True) -> List[InquiryEvent]:
    """Fetch inquiry events matching the filters."""
    return fetch_records(source, events_request(filters, include_brand))


def require_rows(rows: Sequence[T]) -> Sequence[T]:
    """Return rows unchanged, or raise NoDataError when empty."""
    if not rows:
        raise NoDataError()
    return rows
