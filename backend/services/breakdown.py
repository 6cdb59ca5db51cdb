"""
Breakdown Builder - group-by counts to {label, count, percentage} lists.

Every chart/table on the dashboard consumes this shape:

    [{"label": "frustrated", "count": 12, "percentage": 40.0}, ...]

Entries are sorted by count descending. Ties keep first-seen order (the sort
is stable over an insertion-ordered dict). Missing keys are counted under
UNKNOWN so that sum(count) always equals the number of grouped rows.
"""

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from constants import UNKNOWN
from services.metrics import safe_percent

T = TypeVar('T')


def group_count(
    items: Iterable[T],
    key: Callable[[T], Optional[Any]],
    unknown_label: str = UNKNOWN,
) -> Dict[str, int]:
    """
    Count items per key, in first-seen order.

    None and empty-string keys are counted under unknown_label.
    """
    counts: Dict[str, int] = {}
    for item in items:
        value = key(item)
        label = unknown_label if value is None or value == "" else str(value)
        counts[label] = counts.get(label, 0) + 1
    return counts


def group_count_many(
    items: Iterable[T],
    keys: Callable[[T], Iterable[str]],
) -> Dict[str, int]:
    """Count every label an item yields (used for multi-valued fields like bitmasks)."""
    counts: Dict[str, int] = {}
    for item in items:
        for label in keys(item):
            counts[label] = counts.get(label, 0) + 1
    return counts


def to_breakdown(counts: Dict[str, int], total: int) -> List[Dict[str, Any]]:
    """
    Convert a label -> count mapping into a sorted breakdown list.

    Args:
        counts: Insertion-ordered label -> count mapping
        total: Denominator for the percentages

    Returns:
        [{label, count, percentage}] sorted by count descending
    """
    entries = [
        {'label': label, 'count': count, 'percentage': safe_percent(count, total)}
        for label, count in counts.items()
    ]
    entries.sort(key=lambda entry: -entry['count'])
    return entries


def breakdown_by(
    items: List[T],
    key: Callable[[T], Optional[Any]],
    total: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """group_count + to_breakdown; total defaults to len(items)."""
    return to_breakdown(group_count(items, key), len(items) if total is None else total)


def top_label(counts: Dict[str, int]) -> Optional[str]:
    """Label with the highest count; the first-seen label wins ties."""
    best_label = None
    best_count = 0
    for label, count in counts.items():
        if count > best_count:
            best_label = label
            best_count = count
    return best_label


def score_label(value: Optional[float]) -> Optional[str]:
    """Histogram label for a continuous score, rounded half-up (2.5 -> "3")."""
    if value is None:
        return None
    return str(int(math.floor(value + 0.5)))
