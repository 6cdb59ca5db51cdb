"""
Benchmark KPI - one KPI block per brand, always across all brands.

The brand filter is ignored on purpose; the date range still applies.
"""

from typing import Dict, List

from constants import UNKNOWN
from services.breakdown import breakdown_by
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import average_of, count_true, safe_percent


def brand_block(brand: str, events: List) -> Dict[str, object]:
    total = len(events)
    return {
        'brand': brand,
        'totalEvents': total,
        'avgQualityScore': average_of(e.ai_quality_score for e in events),
        'automationRate': average_of(e.automation_rate for e in events),
        'loopRate': safe_percent(count_true(e.ai_loop_detected for e in events), total),
        'bugRate': safe_percent(count_true(e.is_bug for e in events), total),
        'avgFirstResponseSec': average_of(e.first_response_sec for e in events),
        'avgDurationMin': average_of(e.duration_minutes for e in events),
        'deficiencyReportRate': safe_percent(count_true(e.has_deficiency_report for e in events), total),
        'sentimentBreakdown': breakdown_by(events, lambda e: e.tenant_sentiment),
    }


def assemble(source, filters):
    events = require_rows(load_events(source, filters, include_brand=False))

    by_brand: Dict[str, List] = {}
    for event in events:
        by_brand.setdefault(event.brand or UNKNOWN, []).append(event)

    benchmarks = [brand_block(brand, rows) for brand, rows in by_brand.items()]
    benchmarks.sort(key=lambda block: -block['totalEvents'])
    return {'benchmarks': benchmarks}


SPEC = AssemblerSpec(
    endpoint_id='benchmark',
    title='Brand Benchmark',
    assemble=assemble,
)
