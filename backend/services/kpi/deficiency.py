"""
Deficiency KPI - enriched deficiency tickets across the property hierarchy.

Categories come from the bitmask (one count per set bit, so category counts
can exceed the ticket total). Closing time uses the terminal states whose
follow-up timestamp is the closing time; negative durations clamp to 0.
"""

from typing import Dict, List

from constants import CLOSING_STATES, DEFICIENCY_STATES, DEFICIENCY_TYPES, SOLVED_STATES
from services.bitmask import decode_bitmask, format_state
from services.breakdown import group_count_many, to_breakdown
from services.hierarchy import load_enriched_deficiencies
from services.kpi.base import AssemblerSpec
from services.metrics import safe_average, safe_percent
from services.sla import is_real_timestamp
from services.time_buckets import Granularity, count_by_period


def closing_days(deficiencies) -> List[tuple]:
    """(state, days) for closed deficiencies with a real follow-up timestamp."""
    result = []
    for item in deficiencies:
        d = item.deficiency
        if d.deficiency_state not in CLOSING_STATES or not is_real_timestamp(d.next_follow_up):
            continue
        if d.time_added is None:
            continue
        days = (d.next_follow_up - d.time_added).total_seconds() / 86400
        result.append((d.deficiency_state, max(0.0, days)))
    return result


def closing_time_summary(closed: List[tuple]) -> List[Dict[str, object]]:
    by_state: Dict[int, List[float]] = {}
    for state, days in closed:
        by_state.setdefault(state, []).append(days)
    return [
        {
            'state': state,
            'stateLabel': format_state(state, DEFICIENCY_STATES),
            'count': len(days),
            'avgDays': safe_average(sum(days), len(days), 1),
            'minDays': round(min(days), 1),
            'maxDays': round(max(days), 1),
        }
        for state, days in by_state.items()
    ]


def state_breakdown(deficiencies, total: int) -> List[Dict[str, object]]:
    """State distribution ordered by state id (lifecycle order), not by count."""
    counts: Dict[int, int] = {}
    for item in deficiencies:
        state = item.deficiency.deficiency_state
        counts[state] = counts.get(state, 0) + 1
    ordered = sorted(counts.items(), key=lambda pair: (pair[0] is None, pair[0] or 0))
    return [
        {
            'label': format_state(state, DEFICIENCY_STATES),
            'count': count,
            'percentage': safe_percent(count, total),
            'stateId': state,
        }
        for state, count in ordered
    ]


def assemble(source, filters):
    deficiencies, _, _ = load_enriched_deficiencies(source, filters)
    total = len(deficiencies)

    solved = sum(1 for item in deficiencies if item.deficiency.deficiency_state in SOLVED_STATES)
    categories = group_count_many(
        deficiencies, lambda item: decode_bitmask(item.deficiency.deficiency_types, DEFICIENCY_TYPES),
    )
    closed = closing_days(deficiencies)
    all_days = [days for _, days in closed]

    def added(item):
        return item.deficiency.time_added

    return {
        'totalDeficiencies': total,
        'solvedCount': solved,
        'solvedPercent': safe_percent(solved, total),
        'categoryBreakdown': to_breakdown(categories, total),
        'monthlyTrend': count_by_period(deficiencies, added, Granularity.MONTH),
        'quarterlyTrend': count_by_period(deficiencies, added, Granularity.QUARTER),
        'yearlyTrend': count_by_period(deficiencies, added, Granularity.YEAR),
        'closingTimeSummary': closing_time_summary(closed),
        'overallAvgClosingDays': safe_average(sum(all_days), len(all_days), 1),
        'stateBreakdown': state_breakdown(deficiencies, total),
    }


SPEC = AssemblerSpec(
    endpoint_id='deficiency',
    title='Deficiency Analysis',
    assemble=assemble,
)
