"""
Summary KPI - the overview page: flat KPI block plus every standard breakdown.

Source: dashboard base view (date + brand pushed down).
"""

from constants import NO_DEFICIENCY_LABEL
from services.breakdown import breakdown_by, group_count_many, score_label, to_breakdown
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import average_of, count_true, safe_percent


def _inside_label(flag):
    if flag is True:
        return 'inside'
    if flag is False:
        return 'outside'
    return None


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    total = len(events)

    with_report = count_true(e.has_deficiency_report for e in events)
    # null only when no event carries a report time; a real 0 average stays 0
    report_times = [
        e.time_to_deficiency_report_sec for e in events
        if e.time_to_deficiency_report_sec is not None
    ]

    return {
        # Counts & rates
        'totalEvents': total,
        'totalWithDeficiencyReport': with_report,
        'deficiencyReportRate': safe_percent(with_report, total),
        'avgAiQualityScore': average_of(e.ai_quality_score for e in events),
        'avgTenantEffort': average_of(e.tenant_effort_score for e in events),
        'loopDetectionRate': safe_percent(count_true(e.ai_loop_detected for e in events), total),
        'misunderstandingRate': safe_percent(count_true(e.ai_misunderstood for e in events), total),
        'bugRate': safe_percent(count_true(e.is_bug for e in events), total),
        'correctTriageRate': safe_percent(count_true(e.ai_correct_triage for e in events), total),
        'avgUnnecessaryQuestions': average_of(e.ai_unnecessary_questions for e in events),
        'urgencyRate': safe_percent(count_true(e.is_urgent for e in events), total),
        'automationRate': average_of(e.automation_rate for e in events),
        'avgFirstResponseSec': average_of(e.first_response_sec for e in events),
        'avgDurationMin': average_of(e.duration_minutes for e in events),
        'avgTimeToReportSec': average_of(report_times) if report_times else None,
        'agentTakeoverRate': safe_percent(count_true(e.has_agent_takeover for e in events), total),

        # Breakdowns
        'sentimentBreakdown': breakdown_by(events, lambda e: e.tenant_sentiment),
        'severityBreakdown': breakdown_by(events, lambda e: e.estimated_severity),
        'categoryBreakdown': breakdown_by(events, lambda e: e.deficiency_category),
        'resolutionBreakdown': breakdown_by(events, lambda e: e.resolution_method),
        'intentBreakdown': breakdown_by(events, lambda e: e.intent),
        'outcomeBreakdown': breakdown_by(events, lambda e: e.event_outcome),
        'inquiryTypeBreakdown': breakdown_by(events, lambda e: e.inquiry_type),
        'stateBreakdown': breakdown_by(
            events,
            lambda e: e.deficiency_state_label if e.deficiency_state_label is not None else NO_DEFICIENCY_LABEL,
        ),
        'languageBreakdown': breakdown_by(events, lambda e: e.language_used),
        'slaBreakdown': breakdown_by(events, lambda e: e.sla_compliance),
        'qualityScoreDistribution': breakdown_by(events, lambda e: score_label(e.ai_quality_score)),
        'effortScoreDistribution': breakdown_by(events, lambda e: score_label(e.tenant_effort_score)),
        'topTopics': to_breakdown(group_count_many(events, lambda e: e.topic_labels), total),

        # Timing
        'businessHoursBreakdown': breakdown_by(events, lambda e: _inside_label(e.is_inside_hours)),
        'dayOfWeekBreakdown': breakdown_by(events, lambda e: e.started_dow),
        'hourOfDayBreakdown': breakdown_by(events, lambda e: e.started_hour_cet),
    }


SPEC = AssemblerSpec(
    endpoint_id='summary',
    title='Overview KPIs',
    assemble=assemble,
)
