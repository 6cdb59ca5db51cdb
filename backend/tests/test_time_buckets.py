"""
Tests for services/time_buckets.py - bucket keys and trend folding.
"""

from datetime import datetime, timedelta, timezone

from fakes import event_row
from services.records import InquiryEvent, parse_records
from services.time_buckets import (
    Granularity,
    bucket_key,
    count_by_period,
    distinct_by_period,
    iso_week_key,
    month_key,
    quarter_key,
    trend_series,
    year_key,
)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestBucketKeys:

    def test_iso_week_first_thursday(self):
        assert iso_week_key(_utc(2026, 1, 1)) == '2026-W01'

    def test_iso_week_belongs_to_previous_year(self):
        # 2021-01-01 is a Friday: still ISO week 53 of 2020
        assert iso_week_key(_utc(2021, 1, 1)) == '2020-W53'

    def test_iso_week_belongs_to_next_year(self):
        # 2024-12-30 is a Monday of ISO week 1 of 2025
        assert iso_week_key(_utc(2024, 12, 30)) == '2025-W01'

    def test_month_quarter_year(self):
        ts = _utc(2026, 8, 15)
        assert month_key(ts) == '2026-08'
        assert quarter_key(ts) == '2026-Q3'
        assert year_key(ts) == '2026'

    def test_keys_use_utc(self):
        cet = timezone(timedelta(hours=1))
        ts = datetime(2026, 1, 1, 0, 30, tzinfo=cet)  # 2025-12-31 23:30 UTC
        assert bucket_key(ts, Granularity.MONTH) == '2025-12'

    def test_keys_sort_chronologically(self):
        keys = [iso_week_key(_utc(2026, 3, 2)), iso_week_key(_utc(2026, 1, 5)), iso_week_key(_utc(2025, 12, 1))]
        assert sorted(keys) == ['2025-W49', '2026-W02', '2026-W10']


class TestCountByPeriod:

    def test_sorted_and_skips_missing(self):
        items = [_utc(2026, 2, 1), None, _utc(2026, 1, 3), _utc(2026, 1, 20)]
        assert count_by_period(items, lambda ts: ts, Granularity.MONTH) == [
            {'period': '2026-01', 'count': 2},
            {'period': '2026-02', 'count': 1},
        ]

    def test_distinct_values(self):
        items = [(_utc(2026, 1, 3), 'a'), (_utc(2026, 1, 9), 'a'), (_utc(2026, 1, 9), 'b'), (_utc(2026, 2, 1), None)]
        result = distinct_by_period(items, lambda i: i[0], lambda i: i[1], Granularity.MONTH)
        assert result == {'2026-01': {'a', 'b'}}


class TestTrendSeries:

    def test_weekly_fold(self):
        events = parse_records(InquiryEvent, [
            event_row(started_at='2026-01-05T10:00:00Z', ai_quality_score=4, ai_loop_detected=True,
                      automation_rate=100, phone_number='+1'),
            event_row(started_at='2026-01-06T10:00:00Z', ai_quality_score=None, is_bug=True,
                      automation_rate=50, has_deficiency_report=True, phone_number='+2'),
            event_row(started_at='2026-01-13T10:00:00Z', ai_quality_score=3, phone_number='+1'),
            event_row(started_at=None),
        ])

        series = trend_series(events, Granularity.WEEK)

        assert [b['period'] for b in series] == ['2026-W02', '2026-W03']
        first = series[0]
        assert first['count'] == 2
        assert first['avgQuality'] == 4.0
        assert first['loopRate'] == 50.0
        assert first['bugRate'] == 50.0
        assert first['automationRate'] == 75.0
        assert first['deficiencyReportRate'] == 50.0
        assert first['uniqueTenants'] == 2
        assert series[1]['count'] == 1

    def test_quarterly_fold(self):
        events = parse_records(InquiryEvent, [
            event_row(started_at='2026-01-05T10:00:00Z'),
            event_row(started_at='2026-04-05T10:00:00Z'),
            event_row(started_at='2026-03-31T23:59:59Z'),
        ])
        series = trend_series(events, Granularity.QUARTER)
        assert [(b['period'], b['count']) for b in series] == [('2026-Q1', 2), ('2026-Q2', 1)]
