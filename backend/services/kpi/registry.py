"""
KPI Registry - Central runner for all endpoint assemblers.

Routes call this, not individual assembler files.

Usage:
    from services.kpi.registry import run_endpoint

    payload = run_endpoint('summary', source, filters)
"""

import logging
import time
from typing import Any, Dict, List

from services.filters import DashboardFilters
from services.kpi.base import AssemblerSpec, NoDataError

logger = logging.getLogger('kpi.registry')


# =============================================================================
# ASSEMBLER REGISTRY
# =============================================================================

# Import all assembler specs
from services.kpi.summary import SPEC as summary_spec
from services.kpi.ai_quality import SPEC as ai_quality_spec
from services.kpi.ai_performance import SPEC as ai_performance_spec
from services.kpi.trends import SPEC as trends_spec
from services.kpi.deficiency import SPEC as deficiency_spec
from services.kpi.novac import SPEC as novac_spec
from services.kpi.reports import SPEC as reports_spec
from services.kpi.craftsman import SPEC as craftsman_spec
from services.kpi.stimmung import SPEC as stimmung_spec
from services.kpi.benchmark import SPEC as benchmark_spec
from services.kpi.insights import SPEC as insights_spec
from services.kpi.roi import SPEC as roi_spec
from services.kpi.bug_summary import SPEC as bug_summary_spec
from services.kpi.bug_clusters import SPEC as bug_clusters_spec
from services.kpi.review_queue import SPEC as review_queue_spec
from services.kpi.review_stats import SPEC as review_stats_spec
from services.kpi.properties import SPEC as properties_spec


# Explicit order - dashboard navigation relies on this (stable, deterministic)
ENDPOINT_ORDER = [
    'summary',
    'ai_quality',
    'ai_performance',
    'trends',
    'deficiency',
    'novac',
    'reports',
    'craftsman',
    'stimmung',
    'benchmark',
    'insights',
    'roi',
    'bug_summary',
    'bug_clusters',
    'review_queue',
    'review_stats',
    'properties',
]

# Registry by ID for lookup
ENDPOINT_REGISTRY: Dict[str, AssemblerSpec] = {
    spec.endpoint_id: spec
    for spec in (
        summary_spec,
        ai_quality_spec,
        ai_performance_spec,
        trends_spec,
        deficiency_spec,
        novac_spec,
        reports_spec,
        craftsman_spec,
        stimmung_spec,
        benchmark_spec,
        insights_spec,
        roi_spec,
        bug_summary_spec,
        bug_clusters_spec,
        review_queue_spec,
        review_stats_spec,
        properties_spec,
    )
}

ENABLED_ENDPOINTS = [ENDPOINT_REGISTRY[endpoint_id] for endpoint_id in ENDPOINT_ORDER]


# =============================================================================
# EXECUTION
# =============================================================================

def get_spec(endpoint_id: str) -> AssemblerSpec:
    spec = ENDPOINT_REGISTRY.get(endpoint_id)
    if spec is None:
        raise KeyError(f"Unknown endpoint: {endpoint_id}. Available: {list(ENDPOINT_REGISTRY.keys())}")
    return spec


def run_endpoint(endpoint_id: str, source, filters: DashboardFilters, **options) -> Any:
    """
    Run one assembler and return its JSON-ready payload.

    Data-source failures and NoDataError propagate; the route layer maps
    them to 500 / 404. Nothing is cached between calls.

    Args:
        endpoint_id: Registry key (see ENDPOINT_ORDER)
        source: Page source (DataServiceClient or a test double)
        filters: Normalized dashboard filters
        **options: Endpoint-specific options (e.g. granularity for trends)
    """
    spec = get_spec(endpoint_id)
    start = time.perf_counter()
    try:
        payload = spec.assemble(source, filters, **options)
    except NoDataError:
        logger.info("endpoint=%s no_data filters=%s", endpoint_id, filters.to_log_dict())
        raise

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("endpoint=%s assembled in %.1fms filters=%s", endpoint_id, elapsed_ms, filters.to_log_dict())
    return payload


def list_enabled_endpoints() -> List[Dict[str, str]]:
    """List all enabled endpoint IDs and titles."""
    return [
        {"endpoint_id": spec.endpoint_id, "title": spec.title}
        for spec in ENABLED_ENDPOINTS
    ]
