"""
Paginated Fetcher - complete result sets from a page-capped data service.

The data service never returns more than DATA_SERVICE_MAX_ROWS rows per call.
To read a whole table we request fixed windows at increasing offsets until a
window comes back short:

    offset 0     -> 1000 rows
    offset 1000  -> 1000 rows
    offset 2000  ->  500 rows   (short page: done, 2500 rows, 3 calls)

Pages of ONE table are fetched sequentially (each continuation depends on the
previous page being full). INDEPENDENT tables can be fetched concurrently with
fetch_tables(), which waits for all of them.

A window larger than the service cap would come back short on the first call
and end paging with a truncated set, so requested windows are clamped to the cap.

Failure policy: any page error aborts the fetch and propagates. There is no
partial result and no retry.
"""

import contextvars
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type

from constants import DATA_SERVICE_MAX_ROWS
from services.data_source import Predicate
from services.records import BaseRecord, parse_records

logger = logging.getLogger('data_source')

DEFAULT_PAGE_SIZE = DATA_SERVICE_MAX_ROWS
DEFAULT_MAX_WORKERS = 4


def fetch_all(
    source,
    table: str,
    columns: str = '*',
    predicates: Sequence[Predicate] = (),
    page_size: Optional[int] = None,
    order: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch every row of a table/view matching the predicates.

    Args:
        source: Object exposing fetch_page(table, columns, predicates, offset, limit, order)
        table: Table or view name
        columns: Column selection
        predicates: Column filters
        page_size: Window size (defaults to source.page_size, then 1000;
            never more than DATA_SERVICE_MAX_ROWS)
        order: Optional stable ordering for the windows

    Returns:
        All rows, in page order

    Raises:
        Whatever the source raises for a failed page (DataSourceError)
    """
    page_size = page_size or getattr(source, 'page_size', None) or DEFAULT_PAGE_SIZE
    if page_size > DATA_SERVICE_MAX_ROWS:
        logger.warning(
            "fetch_all table=%s page_size=%s exceeds service cap, using %s",
            table, page_size, DATA_SERVICE_MAX_ROWS,
        )
        page_size = DATA_SERVICE_MAX_ROWS
    rows: List[Dict[str, Any]] = []
    offset = 0
    pages = 0
    start = time.perf_counter()

    while True:
        page = source.fetch_page(
            table,
            columns,
            predicates=predicates,
            offset=offset,
            limit=page_size,
            order=order,
        )
        pages += 1
        rows.extend(page)
        if len(page) < page_size:
            break
        offset += page_size

    logger.info(
        "fetch_all table=%s rows=%s pages=%s elapsed_ms=%.1f",
        table, len(rows), pages, (time.perf_counter() - start) * 1000,
    )
    return rows


@dataclass(frozen=True)
class TableRequest:
    """One table to fetch, and the record model its rows are validated into."""
    table: str
    model: Type[BaseRecord]
    columns: str = '*'
    predicates: Sequence[Predicate] = field(default_factory=tuple)
    order: Optional[str] = None


def fetch_records(source, request: TableRequest) -> List[BaseRecord]:
    """fetch_all + validation into typed records."""
    rows = fetch_all(
        source,
        request.table,
        request.columns,
        predicates=request.predicates,
        order=request.order,
    )
    return parse_records(request.model, rows)


def fetch_tables(
    source,
    requests: Dict[str, TableRequest],
    max_workers: Optional[int] = None,
) -> Dict[str, List[BaseRecord]]:
    """
    Fetch several independent tables concurrently and wait for all of them.

    Args:
        source: Page source shared by all workers
        requests: name -> TableRequest
        max_workers: Thread pool size (defaults to source.max_workers, then 4)

    Returns:
        name -> list of records

    Raises:
        The first table failure (in request order). Other fetches are still
        awaited so no worker outlives the request.
    """
    if not requests:
        return {}

    max_workers = max_workers or getattr(source, 'max_workers', None) or DEFAULT_MAX_WORKERS
    workers = min(max_workers, len(requests))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        # Each worker runs in a copy of the caller's context so per-request
        # instrumentation (fetch timing) sees its pages.
        futures = {
            name: executor.submit(contextvars.copy_context().run, fetch_records, source, request)
            for name, request in requests.items()
        }

    return {name: future.result() for name, future in futures.items()}
