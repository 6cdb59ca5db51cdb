"""
SLA / Escalation Evaluator.

For each deficiency with a creation time and a REAL follow-up time:

    elapsed_hours = next_follow_up - time_added
    threshold     = accommodation config (severe if bit 8192 set, else cosmetic)

    elapsed <= threshold          -> compliant
    elapsed <= 1.5 * threshold    -> at_risk
    otherwise                     -> breached

Follow-ups at or before year 2000 are the store's zero-date ("0001-01-01")
and mean "no follow-up yet". Those rows, and rows without timestamps, are
excluded: they count in neither numerator nor denominator of the rate.

Threshold codes contain an hour count such as "WorkdaysWithin48Hours", possibly
followed by a qualifier ("WorkdaysWithin24HoursCalendar"). Known hour counts
are 8/24/48/72; anything else falls back to 72 and is logged.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Optional

from constants import (
    EMERGENCY_BIT,
    SLA_AT_RISK,
    SLA_AT_RISK_FACTOR,
    SLA_BREACHED,
    SLA_CODE_HOURS,
    SLA_COMPLIANT,
    SLA_DEFAULT_HOURS,
    ZERO_DATE_MAX_YEAR,
)
from services.bitmask import has_bit
from services.metrics import safe_percent
from services.records import CompanyConfiguration

logger = logging.getLogger('kpi')

_HOURS_PATTERN = re.compile(r'(\d+)Hours')


def is_real_timestamp(ts: Optional[datetime]) -> bool:
    """False for missing timestamps and the zero-date sentinel."""
    return ts is not None and ts.year > ZERO_DATE_MAX_YEAR


def elapsed_hours(created: Optional[datetime], follow_up: Optional[datetime]) -> Optional[float]:
    """Hours from created to follow_up, or None when either is missing/sentinel."""
    if created is None or not is_real_timestamp(follow_up):
        return None
    return (follow_up - created).total_seconds() / 3600


def parse_sla_hours(code: Optional[str]) -> int:
    """
    Hour count of a threshold code such as 'WorkdaysWithin72Hours'.

    Unknown or missing codes fall back to SLA_DEFAULT_HOURS (72).
    """
    if not code:
        return SLA_DEFAULT_HOURS
    match = _HOURS_PATTERN.search(code.strip())
    if match:
        hours = SLA_CODE_HOURS.get(f"{match.group(1)}Hours")
        if hours is not None:
            return hours
    logger.warning("sla_unknown_threshold_code code=%r default_hours=%s", code, SLA_DEFAULT_HOURS)
    return SLA_DEFAULT_HOURS


def threshold_hours(deficiency_types: int, config: Optional[CompanyConfiguration]) -> int:
    """Threshold for a deficiency: severe code for emergencies, cosmetic code otherwise."""
    if config is None:
        return SLA_DEFAULT_HOURS
    if has_bit(deficiency_types, EMERGENCY_BIT):
        return parse_sla_hours(config.severe_deficiency_response_time)
    return parse_sla_hours(config.cosmetic_issue_response_time)


def classify(elapsed: float, threshold: float) -> str:
    if elapsed <= threshold:
        return SLA_COMPLIANT
    if elapsed <= threshold * SLA_AT_RISK_FACTOR:
        return SLA_AT_RISK
    return SLA_BREACHED


@dataclass
class SlaSummary:
    compliant: int = 0
    at_risk: int = 0
    breached: int = 0
    excluded: int = 0

    @property
    def evaluated(self) -> int:
        return self.compliant + self.at_risk + self.breached

    @property
    def compliance_rate(self) -> float:
        return safe_percent(self.compliant, self.evaluated)

    def add(self, status: str) -> None:
        if status == SLA_COMPLIANT:
            self.compliant += 1
        elif status == SLA_AT_RISK:
            self.at_risk += 1
        else:
            self.breached += 1


def evaluate_sla(
    deficiencies: Iterable,
    configs: Dict[str, CompanyConfiguration],
) -> SlaSummary:
    """
    Classify enriched deficiencies against their accommodation's thresholds.

    Args:
        deficiencies: EnrichedDeficiency items (already brand/date filtered)
        configs: accommodation_id -> CompanyConfiguration

    Returns:
        SlaSummary with compliant/at_risk/breached/excluded counts
    """
    summary = SlaSummary()
    for item in deficiencies:
        d = item.deficiency
        elapsed = elapsed_hours(d.time_added, d.next_follow_up)
        if elapsed is None:
            summary.excluded += 1
            continue
        config = configs.get(item.accommodation_id) if item.accommodation_id else None
        summary.add(classify(elapsed, threshold_hours(d.deficiency_types, config)))
    return summary
