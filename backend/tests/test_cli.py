"""
Tests for cli.py - click commands over the assembler registry.
"""

import json

import pytest
from click.testing import CliRunner

import cli as cli_module
from constants import BASE_VIEW
from fakes import FakeSource, event_row


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_client(monkeypatch):
    """Replace the HTTP client and env config with an in-memory source."""
    source = FakeSource({BASE_VIEW: [event_row()]})
    monkeypatch.setattr('services.data_source.DataServiceClient', lambda config: source)
    monkeypatch.setattr('config.DataSourceConfig.from_env', classmethod(lambda cls: None))
    return source


def test_endpoints_lists_registry(runner):
    result = runner.invoke(cli_module.cli, ['endpoints'])
    assert result.exit_code == 0
    assert 'summary' in result.output
    assert 'review_stats' in result.output


def test_unknown_endpoint_is_usage_error(runner):
    result = runner.invoke(cli_module.cli, ['run', 'median_psf'])
    assert result.exit_code == 2
    assert 'Unknown endpoint' in result.output


def test_granularity_only_for_trends(runner):
    result = runner.invoke(cli_module.cli, ['run', 'summary', '--granularity', 'month'])
    assert result.exit_code == 2


def test_run_prints_json(runner, fake_client):
    result = runner.invoke(cli_module.cli, ['run', 'trends', '--granularity', 'month'])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload['granularity'] == 'month'
    assert payload['trends'][0]['period'] == '2026-01'


def test_run_no_data_exit_code(runner, fake_client):
    fake_client.tables[BASE_VIEW] = []
    result = runner.invoke(cli_module.cli, ['run', 'summary', '--brand', 'novac'])
    assert result.exit_code == 1
    assert 'No data found' in result.output
