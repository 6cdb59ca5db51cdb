"""
Review Stats KPI - review status counts and analysis correction statistics.
"""

from constants import CORRECTIONS_TABLE, ID_ORDER
from services.breakdown import breakdown_by
from services.fetcher import TableRequest, fetch_tables
from services.kpi.base import AssemblerSpec, events_request
from services.kpi.review_queue import PENDING_REVIEW
from services.metrics import safe_percent
from services.records import Correction

AUTO_APPROVED = 'auto_approved'
INCORPORATED = 'incorporated'


def assemble(source, filters):
    tables = fetch_tables(source, {
        'events': events_request(filters),
        'corrections': TableRequest(CORRECTIONS_TABLE, Correction, '*', order=ID_ORDER),
    })
    events = tables['events']
    corrections = tables['corrections']
    total_corrections = len(corrections)
    incorporated = sum(1 for c in corrections if c.status == INCORPORATED)

    return {
        'pendingReviews': sum(1 for e in events if e.review_status == PENDING_REVIEW),
        'autoApproved': sum(1 for e in events if e.review_status == AUTO_APPROVED),
        'totalCorrections': total_corrections,
        'correctionsByField': breakdown_by(corrections, lambda c: c.field_corrected),
        'incorporationRate': safe_percent(incorporated, total_corrections),
    }


SPEC = AssemblerSpec(
    endpoint_id='review_stats',
    title='Review Stats',
    assemble=assemble,
)
