"""
Stimmung KPI - tenant sentiment arcs plus craftsman mail analytics.

Arcs come from the event view; mail analytics from deficiencies joined to the
craftsmen table. An empty event set is not a 404 here: both halves report
zeros.
"""

from typing import Dict, List

from constants import (
    CRAFTSMAN_COLUMNS,
    CRAFTSMEN_TABLE,
    ID_ORDER,
    MIN_REPORT_LENGTH,
    TOP_CRAFTSMAN_COMPANIES_LIMIT,
    UNKNOWN_LABEL_DE,
)
from services.breakdown import group_count, to_breakdown
from services.fetcher import TableRequest
from services.hierarchy import load_enriched_deficiencies
from services.kpi.base import AssemblerSpec, events_request
from services.records import Craftsman
from services.sentiment import analyze_arcs
from services.time_buckets import Granularity, count_by_period


def has_report(deficiency) -> bool:
    report = deficiency.deficiency_report
    return bool(report) and len(str(report)) > MIN_REPORT_LENGTH


def mail_analytics(deficiencies, craftsmen: List[Craftsman]) -> Dict[str, object]:
    by_id = {c.id: c for c in craftsmen if c.id is not None}
    with_craftsman = [
        item for item in deficiencies
        if item.deficiency.craftsman_id and item.deficiency.craftsman_id in by_id
    ]

    companies = group_count(
        with_craftsman,
        lambda item: by_id[item.deficiency.craftsman_id].company,
        unknown_label=UNKNOWN_LABEL_DE,
    )
    trades = group_count([c for c in craftsmen if c.trade], lambda c: c.trade)

    return {
        'reportsGenerated': sum(1 for item in deficiencies if has_report(item.deficiency)),
        'reportsSent': sum(1 for item in with_craftsman if has_report(item.deficiency)),
        'uniqueCraftsmen': len({item.deficiency.craftsman_id for item in with_craftsman}),
        'totalCraftsmen': len(craftsmen),
        'craftsmanBreakdown': to_breakdown(companies, len(with_craftsman))[:TOP_CRAFTSMAN_COMPANIES_LIMIT],
        'tradeBreakdown': to_breakdown(trades, len(craftsmen)),
        'monthlyMailVolume': count_by_period(
            with_craftsman, lambda item: item.deficiency.time_added, Granularity.MONTH,
        ),
    }


def assemble(source, filters):
    deficiencies, _, extra = load_enriched_deficiencies(
        source,
        filters,
        extra={
            'events': events_request(filters),
            'craftsmen': TableRequest(CRAFTSMEN_TABLE, Craftsman, CRAFTSMAN_COLUMNS, order=ID_ORDER),
        },
    )
    arcs = analyze_arcs(extra['events'])

    result = {
        'positiveToNegative': arcs.positive_to_negative,
        'positiveToNegativeRate': arcs.positive_to_negative_rate,
        'negativeToPositive': arcs.negative_to_positive,
        'negativeToPositiveRate': arcs.negative_to_positive_rate,
        'totalMultiEventTenants': arcs.qualifying_tenants,
        'sentimentTransitions': arcs.transition_list(),
    }
    result.update(mail_analytics(deficiencies, extra['craftsmen']))
    return result


SPEC = AssemblerSpec(
    endpoint_id='stimmung',
    title='Sentiment & Mail',
    assemble=assemble,
)
