"""
Time Bucketer - calendar bucket keys and per-bucket accumulators.

Bucket keys (all UTC):
    week     YYYY-Www   ISO-8601 week (week 1 contains the first Thursday)
    month    YYYY-MM
    quarter  YYYY-Qn
    year     YYYY

All four key formats sort lexicographically in chronological order, so
emitting buckets with sorted() is enough.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, TypeVar

from services.metrics import safe_average, safe_percent

T = TypeVar('T')


class Granularity(str, Enum):
    WEEK = 'week'
    MONTH = 'month'
    QUARTER = 'quarter'
    YEAR = 'year'


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def iso_week_key(ts: datetime) -> str:
    """ISO-8601 week key, e.g. 2026-01-01 (a Thursday) -> '2026-W01'."""
    iso_year, iso_week, _ = _as_utc(ts).date().isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(ts: datetime) -> str:
    ts = _as_utc(ts)
    return f"{ts.year}-{ts.month:02d}"


def quarter_key(ts: datetime) -> str:
    ts = _as_utc(ts)
    return f"{ts.year}-Q{(ts.month - 1) // 3 + 1}"


def year_key(ts: datetime) -> str:
    return str(_as_utc(ts).year)


_KEY_FUNCS = {
    Granularity.WEEK: iso_week_key,
    Granularity.MONTH: month_key,
    Granularity.QUARTER: quarter_key,
    Granularity.YEAR: year_key,
}


def bucket_key(ts: datetime, granularity: Granularity) -> str:
    return _KEY_FUNCS[Granularity(granularity)](ts)


def count_by_period(
    items: Iterable[T],
    timestamp: Callable[[T], Optional[datetime]],
    granularity: Granularity,
) -> List[Dict[str, object]]:
    """[{period, count}] sorted by period; items without a timestamp are skipped."""
    counts: Dict[str, int] = {}
    for item in items:
        ts = timestamp(item)
        if ts is None:
            continue
        key = bucket_key(ts, granularity)
        counts[key] = counts.get(key, 0) + 1
    return [{'period': period, 'count': counts[period]} for period in sorted(counts)]


def distinct_by_period(
    items: Iterable[T],
    timestamp: Callable[[T], Optional[datetime]],
    value: Callable[[T], Optional[str]],
    granularity: Granularity,
) -> Dict[str, Set[str]]:
    """Distinct non-empty values per period, keys in chronological order."""
    buckets: Dict[str, Set[str]] = {}
    for item in items:
        ts = timestamp(item)
        val = value(item)
        if ts is None or not val:
            continue
        buckets.setdefault(bucket_key(ts, granularity), set()).add(val)
    return {period: buckets[period] for period in sorted(buckets)}


# =============================================================================
# EVENT TREND ACCUMULATOR
# =============================================================================

@dataclass
class TrendBucket:
    """Running totals for one period of inquiry events."""
    count: int = 0
    quality_sum: float = 0.0
    quality_count: int = 0
    loop_count: int = 0
    bug_count: int = 0
    automation_sum: float = 0.0
    automation_count: int = 0
    deficiency_report_count: int = 0
    tenants: Set[str] = field(default_factory=set)

    def add(self, event) -> None:
        self.count += 1
        if event.ai_quality_score is not None:
            self.quality_sum += event.ai_quality_score
            self.quality_count += 1
        if event.ai_loop_detected is True:
            self.loop_count += 1
        if event.is_bug is True:
            self.bug_count += 1
        if event.automation_rate is not None:
            self.automation_sum += event.automation_rate
            self.automation_count += 1
        if event.has_deficiency_report is True:
            self.deficiency_report_count += 1
        if event.phone_number:
            self.tenants.add(event.phone_number)

    def to_dict(self, period: str) -> Dict[str, object]:
        return {
            'period': period,
            'count': self.count,
            'avgQuality': safe_average(self.quality_sum, self.quality_count, 2),
            'loopRate': safe_percent(self.loop_count, self.count),
            'bugRate': safe_percent(self.bug_count, self.count),
            'automationRate': safe_average(self.automation_sum, self.automation_count, 1),
            'deficiencyReportRate': safe_percent(self.deficiency_report_count, self.count),
            'uniqueTenants': len(self.tenants),
        }


def fold_events(events: Iterable, granularity: Granularity) -> Dict[str, TrendBucket]:
    """Fold events with a start time into per-period TrendBuckets, sorted by period."""
    buckets: Dict[str, TrendBucket] = {}
    for event in events:
        if event.started_at is None:
            continue
        key = bucket_key(event.started_at, granularity)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = TrendBucket()
        bucket.add(event)
    return {period: buckets[period] for period in sorted(buckets)}


def trend_series(events: Iterable, granularity: Granularity = Granularity.WEEK) -> List[Dict[str, object]]:
    return [bucket.to_dict(period) for period, bucket in fold_events(events, granularity).items()]
