"""
Data Service Client - read-only access to the remote relational data service.

The service speaks a PostgREST-style HTTP API:

    GET {base_url}/rest/v1/{table}?select=a,b&started_at=gte.2026-01-01T00:00:00.000Z
        &brand=eq.novac&order=id.asc&limit=1000&offset=2000
    Headers: apikey: <key>, Authorization: Bearer <key>

Each call returns at most `limit` rows (the server also enforces its own cap).
Complete result sets are assembled by services.fetcher, not here.

There is NO retry and NO cache: a failed page raises immediately and the
request that triggered it fails with the underlying message.

Usage:
    from config import DataSourceConfig
    from services.data_source import DataServiceClient, Predicate

    client = DataServiceClient(DataSourceConfig.from_env())
    rows = client.fetch_page(
        'azure_accommodations', 'id, name, brand',
        predicates=[Predicate('brand', 'eq', 'novac')],
        offset=0, limit=1000,
    )
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

logger = logging.getLogger('data_source')

# Operators the client knows how to encode
SUPPORTED_OPERATORS = ('eq', 'gte', 'lte')


# =============================================================================
# Errors
# =============================================================================

class DataSourceError(Exception):
    """Base exception for data service failures."""

    def __init__(self, message: str, table: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.table = table
        self.status_code = status_code


class DataSourceHTTPError(DataSourceError):
    """Transport failure or non-2xx response."""
    pass


class DataSourceResponseError(DataSourceError):
    """2xx response whose body is not a JSON array of rows."""
    pass


# =============================================================================
# Predicates
# =============================================================================

@dataclass(frozen=True)
class Predicate:
    """One column filter: column <op> value."""
    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}, must be one of {SUPPORTED_OPERATORS}")

    def to_param(self) -> tuple:
        return self.column, f"{self.op}.{self.value}"

    def matches(self, row: Dict[str, Any]) -> bool:
        """Evaluate against a raw row (used by in-memory sources)."""
        actual = row.get(self.column)
        if actual is None:
            return False
        if self.op == 'eq':
            return str(actual) == str(self.value)
        if self.op == 'gte':
            return str(actual) >= str(self.value)
        return str(actual) <= str(self.value)


# =============================================================================
# Page instrumentation hooks
# =============================================================================

# Callables (table, elapsed_ms, row_count) notified after every page request
_page_listeners: List[Callable[[str, float, int], None]] = []


def add_page_listener(listener: Callable[[str, float, int], None]) -> None:
    """Register a page timing listener (idempotent)."""
    if listener not in _page_listeners:
        _page_listeners.append(listener)


def remove_page_listener(listener: Callable[[str, float, int], None]) -> None:
    if listener in _page_listeners:
        _page_listeners.remove(listener)


def _notify_page(table: str, elapsed_ms: float, row_count: int) -> None:
    for listener in list(_page_listeners):
        listener(table, elapsed_ms, row_count)


# =============================================================================
# HTTP client
# =============================================================================

class DataServiceClient:
    """
    Thin requests.Session wrapper for the remote data service.

    One instance is created per app and shared across requests. A
    requests.Session is safe for concurrent GETs from the fetcher's
    worker threads.
    """

    def __init__(self, config, session: Optional[requests.Session] = None):
        """
        Args:
            config: DataSourceConfig (base_url, api_key, timeout_seconds, ...)
            session: Optional pre-built session (tests)
        """
        self.config = config
        self._rest_url = config.base_url.rstrip('/') + '/rest/v1'
        self._session = session or requests.Session()
        self._session.headers.update({
            'apikey': config.api_key,
            'Authorization': f'Bearer {config.api_key}',
            'Accept': 'application/json',
            'User-Agent': 'TenantAssistantKPI/1.0',
        })

        logger.info("Data service client initialized base_url=%s", config.base_url)

    @property
    def page_size(self) -> int:
        return self.config.page_size

    @property
    def max_workers(self) -> int:
        return self.config.max_workers

    def fetch_page(
        self,
        table: str,
        columns: str = '*',
        predicates: Sequence[Predicate] = (),
        offset: int = 0,
        limit: Optional[int] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one window of rows.

        Args:
            table: Table or view name
            columns: Comma-separated column selection
            predicates: Column filters (AND-ed)
            offset: Row offset of the window
            limit: Window size (defaults to config.page_size)
            order: Optional PostgREST order clause, e.g. 'id.asc'

        Returns:
            List of row dicts (possibly shorter than limit)

        Raises:
            DataSourceHTTPError: Transport failure or non-2xx status
            DataSourceResponseError: Body is not a JSON array
        """
        limit = limit or self.config.page_size
        params = [('select', columns.replace(' ', ''))]
        params.extend(p.to_param() for p in predicates)
        if order:
            params.append(('order', order))
        params.append(('limit', str(limit)))
        params.append(('offset', str(offset)))

        start = time.perf_counter()
        try:
            response = self._session.get(
                f"{self._rest_url}/{table}",
                params=params,
                timeout=self.config.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Data service request failed table=%s offset=%s: %s", table, offset, e)
            raise DataSourceHTTPError(f"Request to {table} failed: {e}", table=table) from e

        elapsed_ms = (time.perf_counter() - start) * 1000

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(
                "Data service error table=%s status=%s message=%s",
                table, response.status_code, message,
            )
            raise DataSourceHTTPError(message, table=table, status_code=response.status_code)

        try:
            rows = response.json()
        except ValueError as e:
            raise DataSourceResponseError(
                f"Invalid JSON from {table}", table=table, status_code=response.status_code
            ) from e

        if not isinstance(rows, list):
            raise DataSourceResponseError(
                f"Expected a list of rows from {table}, got {type(rows).__name__}",
                table=table,
                status_code=response.status_code,
            )

        _notify_page(table, elapsed_ms, len(rows))
        logger.debug(
            "page table=%s offset=%s rows=%s elapsed_ms=%.2f",
            table, offset, len(rows), elapsed_ms,
        )
        return rows


def _error_message(response: requests.Response) -> str:
    """Extract PostgREST's {message: ...} error body, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get('message'):
        return str(body['message'])
    return f"HTTP {response.status_code}: {response.reason or 'error'}"
