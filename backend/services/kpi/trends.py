"""
Trends KPI - per-period event series (week by default).
"""

from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.time_buckets import Granularity, trend_series


def assemble(source, filters, granularity=Granularity.WEEK):
    events = require_rows(load_events(source, filters))
    return {
        'granularity': Granularity(granularity).value,
        'trends': trend_series(events, granularity),
    }


SPEC = AssemblerSpec(
    endpoint_id='trends',
    title='Trends',
    assemble=assemble,
)
