"""
Insights KPI - when tenants write: business hours, weekday, hour of day.
"""

from constants import UNKNOWN
from services.breakdown import group_count, to_breakdown, top_label
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import safe_percent


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    total = len(events)

    inside = sum(1 for e in events if e.is_inside_hours is True)
    outside = sum(1 for e in events if e.is_inside_hours is False)
    by_day = group_count(events, lambda e: e.started_dow)
    by_hour = group_count(events, lambda e: e.started_hour_cet)

    peak_hour = top_label(by_hour)

    return {
        'insideHoursCount': inside,
        'outsideHoursCount': outside,
        'insideHoursRate': safe_percent(inside, total),
        'peakDay': top_label(by_day) or UNKNOWN,
        'peakHour': int(peak_hour) if peak_hour and peak_hour.isdigit() else 0,
        'dayOfWeekBreakdown': to_breakdown(by_day, total),
        'hourOfDayBreakdown': to_breakdown(by_hour, total),
    }


SPEC = AssemblerSpec(
    endpoint_id='insights',
    title='Usage Patterns',
    assemble=assemble,
)
