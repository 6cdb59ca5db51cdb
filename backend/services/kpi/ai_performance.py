"""
AI Performance KPI - response times, SLA compliance, friction, effort, adoption.

Sources (fetched in parallel):
- dashboard base view (events)
- accommodations / condominia / properties / deficiencies (SLA + adoption)
- company configurations (per-accommodation SLA thresholds)
"""

from typing import Dict

from constants import (
    COMPANY_CONFIGURATION_COLUMNS,
    COMPANY_CONFIGURATION_ORDER,
    COMPANY_CONFIGURATIONS_TABLE,
    MEDIAN_FIRST_RESPONSE_MAX_SEC,
    PING_PONG_BANDS,
)
from services.breakdown import to_breakdown, group_count
from services.fetcher import TableRequest
from services.hierarchy import load_enriched_deficiencies
from services.kpi.base import AssemblerSpec, events_request, require_rows
from services.metrics import (
    composite_effort_score,
    count_true,
    median,
    safe_average,
    safe_percent,
)
from services.records import CompanyConfiguration
from services.sla import evaluate_sla
from services.time_buckets import Granularity, distinct_by_period


def ping_pong_distribution(counts):
    """Band the ping-pong counts into the fixed friction bands."""
    distribution = []
    for label, low, high in PING_PONG_BANDS:
        in_band = sum(1 for c in counts if c >= low and (high is None or c <= high))
        distribution.append({
            'label': label,
            'count': in_band,
            'percentage': safe_percent(in_band, len(counts)),
        })
    return distribution


def assemble(source, filters):
    deficiencies, hierarchy, extra = load_enriched_deficiencies(
        source,
        filters,
        extra={
            'events': events_request(filters),
            'configs': TableRequest(
                COMPANY_CONFIGURATIONS_TABLE, CompanyConfiguration, COMPANY_CONFIGURATION_COLUMNS,
                order=COMPANY_CONFIGURATION_ORDER,
            ),
        },
    )
    events = require_rows(extra['events'])
    total = len(events)

    # --- Response time ---
    response_times = [
        e.first_response_sec for e in events
        if e.first_response_sec is not None and e.first_response_sec > 0
    ]
    median_pool = [s for s in response_times if s < MEDIAN_FIRST_RESPONSE_MAX_SEC]

    # --- SLA (deficiency tables) ---
    configs: Dict[str, CompanyConfiguration] = {
        c.accommodation_id: c for c in extra['configs'] if c.accommodation_id
    }
    sla = evaluate_sla(deficiencies, configs)

    # --- Bug flags ---
    false_success = count_true(e.bug_false_success for e in events)
    failed_report = count_true(e.bug_failed_report for e in events)
    bug_count = sum(1 for e in events if e.bug_false_success is True or e.bug_failed_report is True)

    # --- Messages ---
    msg_events = [e for e in events if e.message_count is not None]
    total_messages = sum(e.message_count for e in msg_events)

    # --- Languages (only events with a language) ---
    language_counts = group_count(
        [e for e in events if e.language_used], lambda e: e.language_used,
    )

    # --- Repeat tenants ---
    tenant_counts = group_count([e for e in events if e.phone_number], lambda e: e.phone_number)
    repeat_tenants = sum(1 for c in tenant_counts.values() if c > 1)

    # --- Ping-pong ---
    ping_pongs = [e.ping_pong_count for e in events if e.ping_pong_count is not None]

    # --- Composite effort ---
    effort_scores = [
        composite_effort_score(e.inbound_count, e.duration_minutes, e.ping_pong_count, e.event_outcome)
        for e in events
        if e.inbound_count is not None and e.duration_minutes is not None and e.ping_pong_count is not None
    ]

    # --- Adoption (monthly unique tenants / managed units) ---
    total_properties = hierarchy.count_properties(filters)
    monthly_tenants = distinct_by_period(
        events, lambda e: e.started_at, lambda e: e.phone_number, Granularity.MONTH,
    )
    adoption_trend = [
        {
            'period': period,
            'uniqueTenants': len(tenants),
            'adoptionRate': safe_percent(len(tenants), total_properties),
        }
        for period, tenants in monthly_tenants.items()
    ]

    automation = [e.automation_rate for e in events if e.automation_rate is not None]

    return {
        'totalEvents': total,
        'avgFirstResponseSec': safe_average(sum(response_times), len(response_times), 1),
        'medianFirstResponseSec': median(median_pool),
        'slaComplianceRate': sla.compliance_rate,
        'slaCompliant': sla.compliant,
        'slaBreached': sla.breached,
        'slaAtRisk': sla.at_risk,
        'slaExcluded': sla.excluded,
        'falseSuccessCount': false_success,
        'falseSuccessRate': safe_percent(false_success, total),
        'failedReportCount': failed_report,
        'failedReportRate': safe_percent(failed_report, total),
        'totalMessages': total_messages,
        'avgMessages': safe_average(total_messages, len(msg_events), 1),
        'totalInbound': sum(e.inbound_count or 0 for e in msg_events),
        'totalAiMessages': sum(e.ai_count or 0 for e in msg_events),
        'languageBreakdown': to_breakdown(language_counts, total),
        'uniqueTenants': len(tenant_counts),
        'repeatTenants': repeat_tenants,
        'repeatTenantRate': safe_percent(repeat_tenants, len(tenant_counts)),
        'pingPongRate': safe_percent(sum(1 for c in ping_pongs if c > 0), len(ping_pongs)),
        'avgPingPong': safe_average(sum(ping_pongs), len(ping_pongs), 2),
        'maxPingPong': max(ping_pongs, default=0),
        'pingPongDistribution': ping_pong_distribution(ping_pongs),
        'avgEffortScore': safe_average(sum(effort_scores), len(effort_scores), 2),
        'bugCount': bug_count,
        'bugRate': safe_percent(bug_count, total),
        'bugFalseSuccess': false_success,
        'bugFailedReport': failed_report,
        'totalProperties': total_properties,
        'adoptionTrend': adoption_trend,
        'currentAdoptionRate': adoption_trend[-1]['adoptionRate'] if adoption_trend else 0,
        'avgAutomationRate': safe_average(sum(automation), len(automation), 3),
    }


SPEC = AssemblerSpec(
    endpoint_id='ai_performance',
    title='AI Performance',
    assemble=assemble,
)
