"""
Tests for services/sla.py - escalation classification against thresholds.
"""

from datetime import datetime, timedelta, timezone

import pytest

from constants import SLA_AT_RISK, SLA_BREACHED, SLA_COMPLIANT
from services.hierarchy import EnrichedDeficiency
from services.records import CompanyConfiguration, Deficiency
from services.sla import (
    classify,
    elapsed_hours,
    evaluate_sla,
    is_real_timestamp,
    parse_sla_hours,
    threshold_hours,
)

CREATED = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)

CONFIGS = {
    '1': CompanyConfiguration(
        accommodation_id='1',
        cosmetic_issue_response_time='WorkdaysWithin72Hours',
        severe_deficiency_response_time='WorkdaysWithin8Hours',
    ),
}


def _item(hours=None, follow_up=None, types=1, accommodation_id='1'):
    if hours is not None:
        follow_up = CREATED + timedelta(hours=hours)
    deficiency = Deficiency(id='1', deficiency_types=types, time_added=CREATED, next_follow_up=follow_up)
    return EnrichedDeficiency(
        deficiency=deficiency,
        brand='novac',
        building_address='Bahnhofstrasse 1',
        accommodation_id=accommodation_id,
        property_owner=None,
        apartment_number='1.1',
    )


class TestParseSlaHours:

    @pytest.mark.parametrize('code,hours', [
        ('WorkdaysWithin8Hours', 8),
        ('WorkdaysWithin24Hours', 24),
        ('WorkdaysWithin48Hours', 48),
        ('WorkdaysWithin72Hours', 72),
        (' WorkdaysWithin24Hours ', 24),
        ('WorkdaysWithin24HoursCalendar', 24),
        ('CalendarWithin48HoursStrict', 48),
    ])
    def test_known_codes(self, code, hours):
        assert parse_sla_hours(code) == hours

    @pytest.mark.parametrize('code', [None, '', 'Sometime', 'WorkdaysWithin36Hours', 'WorkdaysWithin128Hours'])
    def test_unknown_codes_default_to_72(self, code):
        assert parse_sla_hours(code) == 72


class TestClassify:

    def test_boundaries(self):
        assert classify(72, 72) == SLA_COMPLIANT
        assert classify(80, 72) == SLA_AT_RISK
        assert classify(108, 72) == SLA_AT_RISK
        assert classify(110, 72) == SLA_BREACHED

    def test_emergency_uses_severe_threshold(self):
        assert threshold_hours(8192, CONFIGS['1']) == 8
        assert threshold_hours(1, CONFIGS['1']) == 72
        assert threshold_hours(8192, None) == 72


class TestTimestamps:

    def test_zero_date_is_not_real(self):
        assert not is_real_timestamp(datetime(1, 1, 1, tzinfo=timezone.utc))
        assert not is_real_timestamp(datetime(2000, 12, 31, tzinfo=timezone.utc))
        assert is_real_timestamp(datetime(2001, 1, 1, tzinfo=timezone.utc))

    def test_elapsed_hours(self):
        assert elapsed_hours(CREATED, CREATED + timedelta(hours=80)) == 80
        assert elapsed_hours(None, CREATED) is None
        assert elapsed_hours(CREATED, datetime(1, 1, 1, tzinfo=timezone.utc)) is None


class TestEvaluateSla:

    def test_counts_and_rate(self):
        summary = evaluate_sla([
            _item(hours=10),
            _item(hours=80),
            _item(hours=110),
            _item(hours=9, types=8192),   # emergency: 9h > 8h, <= 12h
            _item(follow_up=datetime(1, 1, 1, tzinfo=timezone.utc)),
            _item(follow_up=None),
        ], CONFIGS)

        assert summary.compliant == 1
        assert summary.at_risk == 2
        assert summary.breached == 1
        assert summary.excluded == 2
        assert summary.evaluated == 4
        assert summary.compliance_rate == 25.0

    def test_broken_chain_uses_default_threshold(self):
        summary = evaluate_sla([_item(hours=80, accommodation_id=None)], CONFIGS)
        assert summary.at_risk == 1

    def test_nothing_evaluated(self):
        summary = evaluate_sla([_item(follow_up=None)], CONFIGS)
        assert summary.evaluated == 0
        assert summary.compliance_rate == 0
