"""
ROI KPI - what the handled inquiries would have cost without the assistant.

Per-inquiry prices come from the first row of the pricing table. A missing
table, row or price falls back to the defaults.
"""

import logging
from typing import Tuple

from constants import (
    DEFAULT_AILEAN_COST_PER_INQUIRY,
    DEFAULT_MANUAL_COST_PER_INQUIRY,
    PRICING_TABLE,
)
from services.breakdown import group_count
from services.data_source import DataSourceError
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import safe_percent
from services.records import Pricing, parse_records

logger = logging.getLogger('kpi')


def load_pricing(source) -> Tuple[float, float]:
    """(manual cost, assistant cost) per inquiry."""
    manual = DEFAULT_MANUAL_COST_PER_INQUIRY
    assistant = DEFAULT_AILEAN_COST_PER_INQUIRY
    try:
        rows = source.fetch_page(PRICING_TABLE, '*', limit=1)
    except DataSourceError as e:
        logger.warning("pricing_unavailable table=%s error=%s, using defaults", PRICING_TABLE, e)
        return manual, assistant

    pricing = parse_records(Pricing, rows[:1])
    if pricing:
        row = pricing[0]
        if row.manual_cost_per_inquiry is not None:
            manual = row.manual_cost_per_inquiry
        if row.ailean_cost_per_inquiry is not None:
            assistant = row.ailean_cost_per_inquiry
    return manual, assistant


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    manual, assistant = load_pricing(source)
    total = len(events)

    categories = group_count(events, lambda e: e.inquiry_type or e.deficiency_category)
    category_breakdown = [
        {
            'category': category,
            'count': count,
            'manualCost': round(count * manual, 2),
            'aileanCost': round(count * assistant, 2),
            'savings': round(count * (manual - assistant), 2),
        }
        for category, count in categories.items()
    ]
    category_breakdown.sort(key=lambda row: -row['count'])

    without_assistant = round(total * manual, 2)
    with_assistant = round(total * assistant, 2)
    savings = round(without_assistant - with_assistant, 2)

    return {
        'totalUnits': len({e.conversation_id for e in events}),
        'totalInquiries': total,
        'categoryBreakdown': category_breakdown,
        'kostenOhneAilean': without_assistant,
        'kostenMitAilean': with_assistant,
        'ersparnis': savings,
        'savingsPercentage': safe_percent(savings, without_assistant),
    }


SPEC = AssemblerSpec(
    endpoint_id='roi',
    title='ROI',
    assemble=assemble,
)
