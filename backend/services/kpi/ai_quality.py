"""
AI Quality KPI - quality score, loop/misunderstanding/triage rates, weekly trend.
"""

from services.breakdown import breakdown_by, score_label
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import average_of, count_true, safe_average, safe_percent
from services.time_buckets import Granularity, fold_events


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    total = len(events)

    loop_count = count_true(e.ai_loop_detected for e in events)
    misunderstanding_count = count_true(e.ai_misunderstood for e in events)

    quality_trend = [
        {'period': period, 'value': safe_average(bucket.quality_sum, bucket.quality_count, 2)}
        for period, bucket in fold_events(events, Granularity.WEEK).items()
    ]

    return {
        'avgQualityScore': average_of(e.ai_quality_score for e in events),
        'qualityScoreDistribution': breakdown_by(events, lambda e: score_label(e.ai_quality_score)),
        'loopRate': safe_percent(loop_count, total),
        'loopCount': loop_count,
        'misunderstandingRate': safe_percent(misunderstanding_count, total),
        'misunderstandingCount': misunderstanding_count,
        'correctTriageRate': safe_percent(count_true(e.ai_correct_triage for e in events), total),
        'avgUnnecessaryQuestions': average_of(e.ai_unnecessary_questions for e in events),
        'sentimentBreakdown': breakdown_by(events, lambda e: e.tenant_sentiment),
        'resolutionBreakdown': breakdown_by(events, lambda e: e.resolution_method),
        'qualityTrend': quality_trend,
    }


SPEC = AssemblerSpec(
    endpoint_id='ai_quality',
    title='AI Quality',
    assemble=assemble,
)
