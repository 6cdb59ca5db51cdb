"""
Bug Summary KPI - bug totals and the breakdowns among flagged bug events.
"""

from services.breakdown import breakdown_by
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import safe_percent
from services.time_buckets import Granularity, count_by_period


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    bugs = [e for e in events if e.is_bug is True]
    total_bugs = len(bugs)

    weekly = count_by_period(bugs, lambda e: e.started_at, Granularity.WEEK)

    return {
        'totalBugs': total_bugs,
        'bugRate': safe_percent(total_bugs, len(events)),
        'categoryBreakdown': breakdown_by(bugs, lambda e: e.bug_category),
        'reproducibilityBreakdown': breakdown_by(bugs, lambda e: e.reproducible),
        'statusBreakdown': breakdown_by(bugs, lambda e: e.review_status),
        'unreviewedCount': sum(1 for e in bugs if e.bug_reviewed_at is None),
        'bugTrend': [{'period': point['period'], 'value': point['count']} for point in weekly],
    }


SPEC = AssemblerSpec(
    endpoint_id='bug_summary',
    title='Bug Summary',
    assemble=assemble,
)
