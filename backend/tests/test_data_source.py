"""
Tests for services/data_source.py - PostgREST page client.

The HTTP session is mocked; nothing here talks to a real data service.
"""

from unittest.mock import Mock

import pytest
import requests

from config import DataSourceConfig
from services.data_source import (
    DataServiceClient,
    DataSourceHTTPError,
    DataSourceResponseError,
    Predicate,
    add_page_listener,
    remove_page_listener,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def config():
    return DataSourceConfig(base_url='https://data.example.com/', api_key='secret-key', page_size=1000)


def _response(status_code=200, body=None, reason='OK', invalid_json=False):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    if invalid_json:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    session.get.return_value = _response(body=[{'id': 1}])
    return session


@pytest.fixture
def client(config, session):
    return DataServiceClient(config, session=session)


# =============================================================================
# Request shape
# =============================================================================

class TestRequestShape:

    def test_auth_headers(self, client, session):
        assert session.headers['apikey'] == 'secret-key'
        assert session.headers['Authorization'] == 'Bearer secret-key'

    def test_url_and_params(self, client, session):
        client.fetch_page(
            'azure_accommodations', 'id, name, brand',
            predicates=[Predicate('brand', 'eq', 'novac')],
            offset=2000, limit=1000, order='id.asc',
        )

        args, kwargs = session.get.call_args
        assert args[0] == 'https://data.example.com/rest/v1/azure_accommodations'
        assert kwargs['params'] == [
            ('select', 'id,name,brand'),
            ('brand', 'eq.novac'),
            ('order', 'id.asc'),
            ('limit', '1000'),
            ('offset', '2000'),
        ]
        assert kwargs['timeout'] == 30

    def test_limit_defaults_to_page_size(self, client, session):
        client.fetch_page('v_dashboard_base')
        params = dict(session.get.call_args.kwargs['params'])
        assert params['limit'] == '1000'
        assert params['offset'] == '0'
        assert 'order' not in params

    def test_returns_rows(self, client):
        assert client.fetch_page('v_dashboard_base') == [{'id': 1}]


# =============================================================================
# Failures
# =============================================================================

class TestFailures:

    def test_error_body_message_is_surfaced(self, client, session):
        session.get.return_value = _response(400, {'message': 'column "x" does not exist'}, 'Bad Request')

        with pytest.raises(DataSourceHTTPError) as exc_info:
            client.fetch_page('v_dashboard_base')

        assert str(exc_info.value) == 'column "x" does not exist'
        assert exc_info.value.status_code == 400
        assert exc_info.value.table == 'v_dashboard_base'

    def test_error_without_body_uses_status_line(self, client, session):
        session.get.return_value = _response(503, reason='Service Unavailable', invalid_json=True)

        with pytest.raises(DataSourceHTTPError, match='HTTP 503: Service Unavailable'):
            client.fetch_page('v_dashboard_base')

    def test_transport_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(DataSourceHTTPError, match='refused'):
            client.fetch_page('v_dashboard_base')

    def test_non_list_body(self, client, session):
        session.get.return_value = _response(body={'rows': []})

        with pytest.raises(DataSourceResponseError, match='Expected a list'):
            client.fetch_page('v_dashboard_base')

    def test_invalid_json(self, client, session):
        session.get.return_value = _response(invalid_json=True)

        with pytest.raises(DataSourceResponseError):
            client.fetch_page('v_dashboard_base')


class TestPredicate:

    def test_unsupported_operator(self):
        with pytest.raises(ValueError):
            Predicate('brand', 'like', 'nov%')

    def test_to_param(self):
        assert Predicate('started_at', 'gte', '2026-01-01T00:00:00.000Z').to_param() == (
            'started_at', 'gte.2026-01-01T00:00:00.000Z'
        )

    def test_matches(self):
        row = {'brand': 'novac', 'started_at': '2026-01-05T10:00:00Z', 'x': None}
        assert Predicate('brand', 'eq', 'novac').matches(row)
        assert Predicate('started_at', 'lte', '2026-01-31T23:59:59.999Z').matches(row)
        assert not Predicate('started_at', 'gte', '2026-02-01T00:00:00.000Z').matches(row)
        assert not Predicate('x', 'eq', 'None').matches(row)


def test_page_listener_is_notified(client):
    seen = []

    def listener(table, elapsed_ms, row_count):
        seen.append((table, row_count))

    add_page_listener(listener)
    try:
        client.fetch_page('v_dashboard_base')
    finally:
        remove_page_listener(listener)

    assert seen == [('v_dashboard_base', 1)]
