"""
Review Queue KPI - events waiting for a human review, newest first.

Returns a bare list (the queue table consumes an array).
"""

from datetime import datetime, timezone

from services.kpi.base import AssemblerSpec, load_events

PENDING_REVIEW = 'pending_review'

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_camel(event) -> dict:
    return {
        'conversationId': event.conversation_id,
        'inquirySequence': event.inquiry_sequence,
        'reviewStatus': event.review_status,
        'eventSummary': event.event_summary,
        'deficiencyCategory': event.deficiency_category,
        'aiQualityScore': event.ai_quality_score,
        'tenantSentiment': event.tenant_sentiment,
        'isBug': event.is_bug,
        'bugCategory': event.bug_category,
        'bugClusterLabel': event.bug_cluster_label,
        'linearIssueId': event.linear_issue_id,
        'aiLoopDetected': event.ai_loop_detected,
        'aiMisunderstood': event.ai_misunderstood,
        'resolutionMethod': event.resolution_method,
        'startedAt': event.started_at.isoformat() if event.started_at else None,
        'brand': event.brand,
    }


def assemble(source, filters):
    pending = [e for e in load_events(source, filters) if e.review_status == PENDING_REVIEW]
    # Events without a start time sort last
    pending.sort(key=lambda e: e.started_at or _EPOCH, reverse=True)
    return [to_camel(e) for e in pending]


SPEC = AssemblerSpec(
    endpoint_id='review_queue',
    title='Review Queue',
    assemble=assemble,
)
