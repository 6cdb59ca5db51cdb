"""
Metric Calculators - shared numeric helpers for every KPI assembler.

RULES:
- Rates are percentages in [0, 100] rounded to a fixed number of decimals.
- A zero denominator yields 0, never ZeroDivisionError or NaN.
- median() is the UPPER median: sorted(values)[n // 2]. Even-length inputs
  do not interpolate. Downstream dashboards were built against this value.
"""

from typing import Iterable, List, Optional, Sequence

from constants import EFFORT_DURATION_CAP_MIN, EFFORT_WEIGHTS


def safe_percent(numerator: float, denominator: float, decimals: int = 1) -> float:
    """Percentage of numerator over denominator, 0 when denominator is 0."""
    if not denominator:
        return 0
    return round(numerator / denominator * 100, decimals)


def safe_average(total: float, count: int, decimals: int = 1) -> float:
    """Average of total over count, 0 when count is 0."""
    if not count:
        return 0
    return round(total / count, decimals)


def average_of(values: Iterable[Optional[float]], decimals: int = 2) -> float:
    """Average of the non-null values, 0 when there are none."""
    present = [float(v) for v in values if v is not None]
    return safe_average(sum(present), len(present), decimals)


def median(values: Sequence[float]) -> float:
    """
    Upper median of values (0 for an empty sequence).

    >>> median([1, 2, 3, 4])
    3
    """
    if not values:
        return 0
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def count_true(flags: Iterable[Optional[bool]]) -> int:
    """Number of flags that are exactly True (None and False do not count)."""
    return sum(1 for flag in flags if flag is True)


# =============================================================================
# COMPOSITE EFFORT SCORE
# =============================================================================

def _tier(value: float, upper_bounds: List[float]) -> int:
    """Map value onto the 1/3/5/7/9 scale using inclusive upper bounds."""
    for index, bound in enumerate(upper_bounds):
        if value <= bound:
            return 1 + 2 * index
    return 9


def score_contact(inbound_count: float) -> int:
    return _tier(inbound_count, [3, 6, 10, 15])


def score_elapsed(duration_minutes: float) -> int:
    return _tier(min(duration_minutes, EFFORT_DURATION_CAP_MIN), [5, 15, 30, 60])


def score_friction(ping_pong_count: float) -> int:
    return _tier(ping_pong_count, [2, 5, 8, 12])


def score_resolution(outcome: Optional[str]) -> int:
    if outcome == "resolved":
        return 1
    if outcome == "no_response":
        return 5
    if outcome == "unresolved":
        return 7
    return 9


def composite_effort_score(
    inbound_count: float,
    duration_minutes: float,
    ping_pong_count: float,
    outcome: Optional[str],
) -> float:
    """
    Weighted tenant-effort proxy on a 1..9 scale (lower is better).

    Weights: contact 0.30, elapsed 0.20, friction 0.25, resolution 0.25.
    """
    w_contact, w_elapsed, w_friction, w_resolution = EFFORT_WEIGHTS
    return (
        w_contact * score_contact(inbound_count)
        + w_elapsed * score_elapsed(duration_minutes)
        + w_friction * score_friction(ping_pong_count)
        + w_resolution * score_resolution(outcome)
    )
