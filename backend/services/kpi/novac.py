"""
NOVAC KPI - NOVAC portfolio review: tickets, escalations, per-building view.

Always scoped to the NOVAC brand, whatever brand the caller selected.
"""

from typing import Dict

from constants import (
    BRAND_NOVAC,
    DEFICIENCY_TYPES,
    ESCALATED_STATES,
    FIRST_ESCALATION_STATES,
    SECOND_ESCALATION_STATES,
)
from services.bitmask import decode_bitmask
from services.breakdown import group_count, group_count_many, to_breakdown
from services.hierarchy import load_enriched_deficiencies
from services.kpi.base import AssemblerSpec, events_request
from services.kpi.deficiency import closing_days
from services.metrics import count_true, safe_average, safe_percent


def escalation_ratio(first: int, second: int):
    """1st / 2nd escalations; None when undefined (second == 0 but first > 0)."""
    if second > 0:
        return round(first / second, 2)
    if first > 0:
        return None
    return 0


def building_breakdown(deficiencies):
    buildings: Dict[str, Dict[str, int]] = {}
    for item in deficiencies:
        entry = buildings.setdefault(item.building_address, {'count': 0, 'escalated': 0})
        entry['count'] += 1
        if item.deficiency.deficiency_state in ESCALATED_STATES:
            entry['escalated'] += 1
    rows = [
        {
            'address': address,
            'count': data['count'],
            'escalated': data['escalated'],
            'escalationRate': safe_percent(data['escalated'], data['count']),
        }
        for address, data in buildings.items()
    ]
    rows.sort(key=lambda row: -row['count'])
    return rows


def assemble(source, filters):
    novac_filters = filters.for_brand(BRAND_NOVAC)
    deficiencies, _, extra = load_enriched_deficiencies(
        source, novac_filters, extra={'events': events_request(novac_filters)},
    )
    events = extra['events']
    total = len(deficiencies)

    first = sum(1 for item in deficiencies if item.deficiency.deficiency_state in FIRST_ESCALATION_STATES)
    second = sum(1 for item in deficiencies if item.deficiency.deficiency_state in SECOND_ESCALATION_STATES)
    topics = group_count_many(
        deficiencies, lambda item: decode_bitmask(item.deficiency.deficiency_types, DEFICIENCY_TYPES),
    )
    processing_days = [days for _, days in closing_days(deficiencies)]

    bug_count = count_true(e.is_bug for e in events)
    bug_categories = group_count(
        [e for e in events if e.is_bug is True and e.bug_category], lambda e: e.bug_category,
    )

    return {
        'totalTickets': total,
        'firstEscalation': first,
        'secondEscalation': second,
        'topicBreakdown': to_breakdown(topics, total),
        'buildingBreakdown': building_breakdown(deficiencies),
        'avgProcessingDays': safe_average(sum(processing_days), len(processing_days), 1),
        'bugCount': bug_count,
        'bugRate': safe_percent(bug_count, len(events)),
        'bugCategoryBreakdown': to_breakdown(bug_categories, bug_count),
        'escalationRatio': escalation_ratio(first, second),
        'totalEvents': len(events),
        'conversionRate': safe_percent(total, len(events)),
    }


SPEC = AssemblerSpec(
    endpoint_id='novac',
    title='NOVAC Review',
    assemble=assemble,
)
