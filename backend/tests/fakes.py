"""
Test doubles and row builders shared by the backend tests.

Rows are plain dicts, exactly as the data service would return them.
"""

import threading

from constants import (
    ACCOMMODATIONS_TABLE,
    CONDOMINIA_TABLE,
    DEFICIENCIES_TABLE,
    PROPERTIES_TABLE,
)
from services.data_source import DataSourceHTTPError


class FakeSource:
    """
    In-memory stand-in for DataServiceClient.

    Rows are plain dicts, exactly as the data service would return them.
    Every page call is recorded in `calls` as (table, offset, limit); the
    first predicates and order seen per table are kept for assertions.
    """

    def __init__(self, tables=None, page_size=1000, max_workers=4, failing=None):
        self.tables = {name: list(rows) for name, rows in (tables or {}).items()}
        self.page_size = page_size
        self.max_workers = max_workers
        self.failing = dict(failing or {})
        self.calls = []
        self.predicates_seen = {}
        self.orders_seen = {}
        self._lock = threading.Lock()

    def fetch_page(self, table, columns='*', predicates=(), offset=0, limit=None, order=None):
        limit = limit or self.page_size
        with self._lock:
            self.calls.append((table, offset, limit))
            self.predicates_seen.setdefault(table, list(predicates))
            self.orders_seen.setdefault(table, order)

        if table in self.failing:
            raise DataSourceHTTPError(self.failing[table], table=table, status_code=500)

        rows = [row for row in self.tables.get(table, []) if all(p.matches(row) for p in predicates)]
        if order:
            rows = sort_rows(rows, order)
        return [dict(row) for row in rows[offset:offset + limit]]

    def calls_for(self, table):
        return [call for call in self.calls if call[0] == table]


def _sort_value(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, '')
    return (1, 0, str(value))


def sort_rows(rows, order):
    """Apply a PostgREST order string ("a.asc,b.desc") to a list of row dicts."""
    rows = list(rows)
    for key in reversed(order.split(',')):
        column, _, direction = key.strip().partition('.')
        rows.sort(
            key=lambda row: (row.get(column) is None, _sort_value(row.get(column))),
            reverse=direction == 'desc',
        )
    return rows


# =============================================================================
# Row builders
# =============================================================================

def event_row(**overrides):
    """One v_dashboard_base row with neutral defaults."""
    row = {
        'conversation_id': 'c-1',
        'inquiry_sequence': 1,
        'phone_number': '+41790000001',
        'brand': 'novac',
        'intent': 'report_deficiency',
        'inquiry_type': 'deficiency',
        'topic_labels': [],
        'deficiency_category': 'Sanitaer',
        'language_used': 'de',
        'estimated_severity': 'medium',
        'tenant_sentiment': 'neutral',
        'resolution_method': 'ai_resolved',
        'event_outcome': 'resolved',
        'sla_compliance': 'compliant',
        'event_summary': 'Tropfender Wasserhahn',
        'started_at': '2026-01-05T10:00:00Z',
        'ended_at': '2026-01-05T10:06:00Z',
        'first_response_sec': 30,
        'duration_minutes': 6,
        'time_to_deficiency_report_sec': None,
        'is_inside_hours': True,
        'started_dow': 1,
        'started_hour_cet': 11,
        'message_count': 6,
        'inbound_count': 3,
        'ai_count': 3,
        'ping_pong_count': 2,
        'automation_rate': 100,
        'ai_quality_score': 4,
        'tenant_effort_score': 2,
        'ai_unnecessary_questions': 0,
        'ai_loop_detected': False,
        'ai_misunderstood': False,
        'ai_correct_triage': True,
        'is_urgent': False,
        'has_agent_takeover': False,
        'has_deficiency_report': False,
        'has_craftsman': False,
        'deficiency_state': None,
        'deficiency_state_label': None,
        'deficiency_state_category': None,
        'deficiency_total_cost': None,
        'is_bug': False,
        'bug_false_success': False,
        'bug_failed_report': False,
        'bug_category': None,
        'bug_cluster_label': None,
        'bug_reviewed_at': None,
        'linear_issue_id': None,
        'reproducible': None,
        'review_status': 'auto_approved',
    }
    row.update(overrides)
    return row


def hierarchy_tables(deficiencies, accommodations=None, condominia=None, properties=None):
    """
    Two portfolios, one building each, two units per building:

        acc 1 'NOVAC Immobilien' (novac)       -> condo 10 'Bahnhofstrasse 1, 8001 Zuerich' -> props 100, 101
        acc 2 'Peterhalter AG'   (peterhalter) -> condo 20 'Seeweg 5, 6003 Luzern'          -> props 200, 201
    """
    return {
        ACCOMMODATIONS_TABLE: accommodations if accommodations is not None else [
            {'id': 1, 'name': 'NOVAC Immobilien', 'brand': 'novac'},
            {'id': 2, 'name': 'Peterhalter AG', 'brand': 'peterhalter'},
        ],
        CONDOMINIA_TABLE: condominia if condominia is not None else [
            {'id': 10, 'accommodation_id': 1, 'address': 'Bahnhofstrasse 1, 8001 Zuerich', 'property_owner': 'Muster AG'},
            {'id': 20, 'accommodation_id': 2, 'address': 'Seeweg 5, 6003 Luzern', 'property_owner': None},
        ],
        PROPERTIES_TABLE: properties if properties is not None else [
            {'id': 100, 'real_estate_condominium_id': 10, 'apartment_number': '1.1'},
            {'id': 101, 'real_estate_condominium_id': 10, 'apartment_number': 2},
            {'id': 200, 'real_estate_condominium_id': 20, 'apartment_number': None},
            {'id': 201, 'real_estate_condominium_id': 20, 'apartment_number': 'EG'},
        ],
        DEFICIENCIES_TABLE: deficiencies,
    }


def deficiency_row(**overrides):
    row = {
        'id': 1,
        'real_estate_property_id': 100,
        'deficiency_types': 1,
        'deficiency_state': 0,
        'time_added': '2026-01-05T08:00:00Z',
        'next_follow_up': None,
        'tenant_name': 'Anna Muster',
        'tenant_phone_number': '+41790000001',
        'deficiency_total_cost': None,
        'craftsman_id': None,
        'deficiency_report': None,
    }
    row.update(overrides)
    return row


