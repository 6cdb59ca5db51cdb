"""
Overview Endpoints - event-level KPIs from the dashboard base view.

Endpoints:
- /summary - Flat KPI block and standard breakdowns
- /ai-quality - AI answer quality
- /ai-perf - Response times, SLA, friction, effort, adoption
- /trends - Per-period event series (granularity=week|month|quarter|year)
- /insights - Business hours, weekday, hour-of-day patterns
- /benchmark - Per-brand comparison (ignores the brand filter)

All accept dateFrom/dateTo (aliases from/to) and brand.
"""

from flask import request

from routes.analytics import analytics_bp
from routes.analytics._route_utils import respond
from services.time_buckets import Granularity
from utils.normalize import ValidationError, to_enum, validation_error_response


@analytics_bp.route("/summary", methods=["GET"])
def summary():
    return respond('summary', 'summary')


@analytics_bp.route("/ai-quality", methods=["GET"])
def ai_quality():
    return respond('ai_quality', 'ai_quality')


@analytics_bp.route("/ai-perf", methods=["GET"])
def ai_performance():
    return respond('ai_performance', 'ai_perf')


@analytics_bp.route("/trends", methods=["GET"])
def trends():
    """
    Event trend series.

    Query params:
        granularity: week (default), month, quarter or year. Unlike the
            global filters an unknown value is rejected with 400.
    """
    try:
        granularity = to_enum(
            request.args.get('granularity'),
            Granularity,
            default=Granularity.WEEK,
            field='granularity',
        )
    except ValidationError as e:
        return validation_error_response(e)

    return respond('trends', 'trends', granularity=granularity)


@analytics_bp.route("/insights", methods=["GET"])
def insights():
    return respond('insights', 'insights')


@analytics_bp.route("/benchmark", methods=["GET"])
def benchmark():
    return respond('benchmark', 'benchmark')
