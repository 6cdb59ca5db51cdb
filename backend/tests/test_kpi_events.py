"""
Tests for the event-based KPI assemblers (dashboard base view only).

Each test loads rows into the in-memory source and checks the payload the
dashboard reads. Empty filtered sets must raise NoDataError (-> 404).
"""

import pytest

from constants import BASE_VIEW, BUG_CLUSTERS_TABLE, CORRECTIONS_TABLE, NO_DEFICIENCY_LABEL, PRICING_TABLE
from fakes import FakeSource, event_row
from services.data_source import Predicate
from services.filters import DashboardFilters
from services.kpi import NoDataError
from services.kpi import (
    ai_quality,
    benchmark,
    bug_clusters,
    bug_summary,
    craftsman,
    insights,
    review_queue,
    review_stats,
    roi,
    summary,
    trends,
)
from services.time_buckets import Granularity

NO_FILTERS = DashboardFilters()


def _source(*rows, **tables):
    data = {BASE_VIEW: list(rows)}
    data.update(tables)
    return FakeSource(data)


def _labels(breakdown):
    return {entry['label']: entry['count'] for entry in breakdown}


# =============================================================================
# EMPTY SETS
# =============================================================================

@pytest.mark.parametrize('module', [
    summary, ai_quality, trends, benchmark, insights, craftsman, roi, bug_summary,
])
def test_empty_view_raises_no_data(module):
    with pytest.raises(NoDataError):
        module.assemble(_source(), NO_FILTERS)


# =============================================================================
# SUMMARY
# =============================================================================

class TestSummary:

    @pytest.fixture
    def payload(self):
        source = _source(
            event_row(conversation_id='c-1'),
            event_row(
                conversation_id='c-2',
                has_deficiency_report=True,
                tenant_sentiment='frustrated',
                ai_quality_score=2,
                topic_labels=['Heizung', 'Lift'],
                time_to_deficiency_report_sec=120,
                deficiency_state_label='Gemeldet',
                is_inside_hours=False,
                is_bug=True,
            ),
        )
        return summary.assemble(source, NO_FILTERS)

    def test_counts_and_rates(self, payload):
        assert payload['totalEvents'] == 2
        assert payload['totalWithDeficiencyReport'] == 1
        assert payload['deficiencyReportRate'] == 50.0
        assert payload['avgAiQualityScore'] == 3.0
        assert payload['bugRate'] == 50.0
        assert payload['avgTimeToReportSec'] == 120.0

    def test_breakdowns_reconcile_with_total(self, payload):
        for key in ('sentimentBreakdown', 'severityBreakdown', 'stateBreakdown', 'businessHoursBreakdown'):
            assert sum(entry['count'] for entry in payload[key]) == payload['totalEvents']

    def test_missing_state_label(self, payload):
        assert _labels(payload['stateBreakdown']) == {NO_DEFICIENCY_LABEL: 1, 'Gemeldet': 1}

    def test_business_hours_and_topics(self, payload):
        assert _labels(payload['businessHoursBreakdown']) == {'inside': 1, 'outside': 1}
        assert payload['topTopics'][0] == {'label': 'Heizung', 'count': 1, 'percentage': 50.0}

    def test_no_report_times_is_null(self):
        payload = summary.assemble(_source(event_row()), NO_FILTERS)
        assert payload['avgTimeToReportSec'] is None

    def test_zero_report_time_is_zero(self):
        payload = summary.assemble(
            _source(event_row(time_to_deficiency_report_sec=0), event_row()),
            NO_FILTERS,
        )
        assert payload['avgTimeToReportSec'] == 0

    def test_brand_and_dates_are_pushed_down(self):
        source = _source(
            event_row(brand='novac'),
            event_row(brand='peterhalter'),
            event_row(brand='novac', started_at='2025-12-01T10:00:00Z'),
        )
        filters = DashboardFilters(date_from='2026-01-01', brand='novac')

        payload = summary.assemble(source, filters)

        assert payload['totalEvents'] == 1
        assert Predicate('brand', 'eq', 'novac') in source.predicates_seen[BASE_VIEW]


# =============================================================================
# AI QUALITY / TRENDS
# =============================================================================

def test_ai_quality():
    source = _source(
        event_row(ai_quality_score=5, ai_loop_detected=True, started_at='2026-01-05T10:00:00Z'),
        event_row(ai_quality_score=3, ai_misunderstood=True, started_at='2026-01-06T10:00:00Z'),
        event_row(ai_quality_score=None, ai_correct_triage=False, started_at='2026-01-13T10:00:00Z'),
    )

    payload = ai_quality.assemble(source, NO_FILTERS)

    assert payload['avgQualityScore'] == 4.0
    assert payload['loopCount'] == 1
    assert payload['loopRate'] == 33.3
    assert payload['misunderstandingCount'] == 1
    assert payload['correctTriageRate'] == 66.7
    assert payload['qualityTrend'] == [
        {'period': '2026-W02', 'value': 4.0},
        {'period': '2026-W03', 'value': 0},
    ]


class TestTrends:

    def test_default_is_weekly(self):
        payload = trends.assemble(_source(event_row()), NO_FILTERS)
        assert payload['granularity'] == 'week'
        assert payload['trends'][0]['period'] == '2026-W02'

    def test_monthly(self):
        source = _source(
            event_row(started_at='2026-01-05T10:00:00Z'),
            event_row(started_at='2026-02-05T10:00:00Z'),
            event_row(started_at='2026-02-06T10:00:00Z'),
        )
        payload = trends.assemble(source, NO_FILTERS, granularity=Granularity.MONTH)
        assert [(t['period'], t['count']) for t in payload['trends']] == [('2026-01', 1), ('2026-02', 2)]


# =============================================================================
# BENCHMARK / INSIGHTS
# =============================================================================

def test_benchmark_ignores_brand_filter():
    source = _source(
        event_row(brand='novac', ai_quality_score=4),
        event_row(brand='peterhalter', ai_quality_score=2),
        event_row(brand='peterhalter', ai_quality_score=3),
        event_row(brand=None),
    )

    payload = benchmark.assemble(source, DashboardFilters(brand='novac'))

    blocks = payload['benchmarks']
    assert [b['brand'] for b in blocks] == ['peterhalter', 'novac', 'unknown']
    assert blocks[0]['totalEvents'] == 2
    assert blocks[0]['avgQualityScore'] == 2.5
    assert all(p.column != 'brand' for p in source.predicates_seen[BASE_VIEW])


class TestInsights:

    def test_patterns(self):
        source = _source(
            event_row(started_dow=1, started_hour_cet=11, is_inside_hours=True),
            event_row(started_dow=1, started_hour_cet=11, is_inside_hours=True),
            event_row(started_dow=6, started_hour_cet=22, is_inside_hours=False),
            event_row(started_dow=None, started_hour_cet=None, is_inside_hours=None),
        )

        payload = insights.assemble(source, NO_FILTERS)

        assert payload['insideHoursCount'] == 2
        assert payload['outsideHoursCount'] == 1
        assert payload['insideHoursRate'] == 50.0
        assert payload['peakDay'] == '1'
        assert payload['peakHour'] == 11
        assert _labels(payload['dayOfWeekBreakdown']) == {'1': 2, '6': 1, 'unknown': 1}

    def test_no_hours_known(self):
        payload = insights.assemble(_source(event_row(started_hour_cet=None)), NO_FILTERS)
        assert payload['peakHour'] == 0


# =============================================================================
# CRAFTSMAN
# =============================================================================

def test_craftsman_pipeline():
    source = _source(
        event_row(has_deficiency_report=True, has_craftsman=True,
                  deficiency_state_label='Reparatur abgeschlossen', deficiency_state_category='done',
                  deficiency_category='Sanitaer', deficiency_total_cost=300),
        event_row(has_deficiency_report=True, has_craftsman=True,
                  deficiency_state_label='Handwerker zugewiesen', deficiency_state_category='in_progress',
                  deficiency_category='Sanitaer', deficiency_total_cost=100),
        event_row(has_deficiency_report=True, resolution_method='self_repaired',
                  deficiency_state_label='Reparatur abgeschlossen', deficiency_category='Heizung'),
        event_row(has_deficiency_report=False),
    )

    payload = craftsman.assemble(source, NO_FILTERS)

    assert payload['overview'] == {
        'totalJobs': 3,
        'completionRate': 66.7,
        'selfRepairCount': 1,
        'selfRepairRate': 33.3,
        'craftsmanAssignedRate': 66.7,
    }
    assert payload['pipeline'][0]['stateLabel'] == 'Reparatur abgeschlossen'
    assert payload['pipeline'][0]['count'] == 2
    assert payload['categories'][0] == {'category': 'Sanitaer', 'count': 2, 'totalCost': 400.0, 'avgCost': 200.0}


def test_resolved_label_keywords():
    assert craftsman.is_resolved_label('Mit Firmenhilfe abgeschlossen')
    assert craftsman.is_resolved_label('Closed')
    assert not craftsman.is_resolved_label('Termin geplant')
    assert not craftsman.is_resolved_label(None)


# =============================================================================
# ROI
# =============================================================================

class TestRoi:

    ROWS = (
        event_row(conversation_id='c-1', inquiry_type='deficiency'),
        event_row(conversation_id='c-1', inquiry_type='deficiency'),
        event_row(conversation_id='c-2', inquiry_type=None, deficiency_category='Heizung'),
    )

    def test_default_pricing(self):
        payload = roi.assemble(_source(*self.ROWS), NO_FILTERS)

        assert payload['totalUnits'] == 2
        assert payload['totalInquiries'] == 3
        assert payload['kostenOhneAilean'] == 45
        assert payload['kostenMitAilean'] == 6
        assert payload['ersparnis'] == 39
        assert payload['savingsPercentage'] == 86.7
        assert payload['categoryBreakdown'][0] == {
            'category': 'deficiency', 'count': 2, 'manualCost': 30, 'aileanCost': 4, 'savings': 26,
        }
        assert payload['categoryBreakdown'][1]['category'] == 'Heizung'

    def test_pricing_row_with_partial_override(self):
        source = _source(*self.ROWS, **{PRICING_TABLE: [
            {'manual_cost_per_inquiry': 20, 'ailean_cost_per_inquiry': None},
        ]})
        payload = roi.assemble(source, NO_FILTERS)
        assert payload['kostenOhneAilean'] == 60
        assert payload['kostenMitAilean'] == 6

    def test_pricing_failure_falls_back_to_defaults(self):
        source = _source(*self.ROWS)
        source.failing[PRICING_TABLE] = 'relation "ailean_pricing" does not exist'
        assert roi.load_pricing(source) == (15, 2)


# =============================================================================
# BUGS / REVIEW
# =============================================================================

def test_bug_summary():
    source = _source(
        event_row(is_bug=True, bug_category='loop', reproducible='yes', review_status='pending_review',
                  started_at='2026-01-05T10:00:00Z'),
        event_row(is_bug=True, bug_category='loop', bug_reviewed_at='2026-01-08T09:00:00Z',
                  started_at='2026-01-13T10:00:00Z'),
        event_row(is_bug=False),
        event_row(is_bug=None),
    )

    payload = bug_summary.assemble(source, NO_FILTERS)

    assert payload['totalBugs'] == 2
    assert payload['bugRate'] == 50.0
    assert _labels(payload['categoryBreakdown']) == {'loop': 2}
    assert _labels(payload['reproducibilityBreakdown']) == {'yes': 1, 'unknown': 1}
    assert payload['unreviewedCount'] == 1
    assert payload['bugTrend'] == [{'period': '2026-W02', 'value': 1}, {'period': '2026-W03', 'value': 1}]


def test_bug_clusters_ignore_filters_and_order_by_status():
    source = _source(**{BUG_CLUSTERS_TABLE: [
        {'id': 1, 'cluster_label': 'Loop on greeting', 'status': 'open', 'event_count': 4, 'sprint_ready': True},
        {'id': 2, 'cluster_label': 'Wrong category', 'status': 'closed', 'event_count': None},
    ]})

    payload = bug_clusters.assemble(source, DashboardFilters(brand='novac', date_from='2026-01-01'))

    assert [c['clusterLabel'] for c in payload['clusters']] == ['Wrong category', 'Loop on greeting']
    assert payload['clusters'][0]['eventCount'] == 0
    assert payload['clusters'][1]['sprintReady'] is True
    assert source.predicates_seen[BUG_CLUSTERS_TABLE] == []


class TestReviewQueue:

    def test_pending_newest_first(self):
        source = _source(
            event_row(conversation_id='old', review_status='pending_review', started_at='2026-01-05T10:00:00Z'),
            event_row(conversation_id='none', review_status='pending_review', started_at=None),
            event_row(conversation_id='new', review_status='pending_review', started_at='2026-01-09T10:00:00Z'),
            event_row(conversation_id='done', review_status='auto_approved'),
        )

        queue = review_queue.assemble(source, NO_FILTERS)

        assert [item['conversationId'] for item in queue] == ['new', 'old', 'none']
        assert queue[0]['startedAt'] == '2026-01-09T10:00:00+00:00'

    def test_empty_queue_is_a_list(self):
        assert review_queue.assemble(_source(), NO_FILTERS) == []


def test_review_stats():
    source = _source(
        event_row(review_status='pending_review'),
        event_row(review_status='auto_approved'),
        event_row(review_status='auto_approved'),
        **{CORRECTIONS_TABLE: [
            {'id': 1, 'field_corrected': 'tenant_sentiment', 'status': 'incorporated'},
            {'id': 2, 'field_corrected': 'tenant_sentiment', 'status': 'pending'},
            {'id': 3, 'field_corrected': 'intent', 'status': 'incorporated'},
            {'id': 4, 'field_corrected': None, 'status': 'rejected'},
        ]},
    )

    payload = review_stats.assemble(source, NO_FILTERS)

    assert payload['pendingReviews'] == 1
    assert payload['autoApproved'] == 2
    assert payload['totalCorrections'] == 4
    assert payload['correctionsByField'][0] == {'label': 'tenant_sentiment', 'count': 2, 'percentage': 50.0}
    assert payload['incorporationRate'] == 50.0
