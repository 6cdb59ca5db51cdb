#!/usr/bin/env python3
"""
CLI for the KPI assemblers

Commands:
    endpoints   - List registered dashboard endpoints
    run         - Run one endpoint against the data service and print JSON

Usage:
    python cli.py endpoints
    python cli.py run summary --from 2026-01-01 --to 2026-03-31 --brand novac
    python cli.py run trends --granularity month

Reads DATA_SERVICE_* from the environment / .env, like the API does.
"""

import json
import sys

import click


@click.group()
@click.version_option(version="1.0.0", prog_name="kpi-cli")
def cli():
    """KPI CLI - run dashboard aggregations without the HTTP layer."""
    pass


@cli.command("endpoints")
def endpoints():
    """List registered endpoints in dashboard order."""
    from services.kpi import list_enabled_endpoints

    for entry in list_enabled_endpoints():
        click.echo(f"  {entry['endpoint_id']:<16} {entry['title']}")


@cli.command("run")
@click.argument("endpoint_id")
@click.option("--from", "date_from", default=None, help="Inclusive start date (YYYY-MM-DD)")
@click.option("--to", "date_to", default=None, help="Inclusive end date (YYYY-MM-DD)")
@click.option("--brand", default=None, help="Brand segment, or 'all'")
@click.option(
    "--granularity",
    type=click.Choice(["week", "month", "quarter", "year"]),
    default=None,
    help="Bucket size (trends only)",
)
def run(endpoint_id, date_from, date_to, brand, granularity):
    """
    Run one endpoint and print its payload.

    ENDPOINT_ID: Registry id (see `endpoints`)
    """
    from config import DataSourceConfig
    from services.data_source import DataServiceClient, DataSourceError
    from services.filters import DashboardFilters
    from services.kpi import NoDataError, get_spec, run_endpoint
    from services.time_buckets import Granularity

    try:
        get_spec(endpoint_id)
    except KeyError as e:
        click.secho(f"Error: {e.args[0]}", fg="red")
        sys.exit(2)

    options = {}
    if granularity:
        if endpoint_id != 'trends':
            click.secho("--granularity only applies to trends", fg="red")
            sys.exit(2)
        options['granularity'] = Granularity(granularity)

    filters = DashboardFilters(date_from=date_from, date_to=date_to, brand=brand)
    source = DataServiceClient(DataSourceConfig.from_env())

    try:
        payload = run_endpoint(endpoint_id, source, filters, **options)
    except NoDataError:
        click.secho("No data found", fg="yellow")
        sys.exit(1)
    except DataSourceError as e:
        click.secho(f"Data service error: {e}", fg="red")
        sys.exit(1)

    click.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


if __name__ == "__main__":
    cli()
