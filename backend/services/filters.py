"""
Dashboard filter normalization.

Every endpoint accepts the same three optional query params:

    dateFrom (alias: from)   ISO date, inclusive start of day (UTC)
    dateTo   (alias: to)     ISO date, inclusive end of day 23:59:59.999 (UTC)
    brand                    segment label, or 'all'

Global filters are forgiving: a missing, blank, malformed or unrecognized
value means "no filter" rather than a 400. The normalized object is frozen
and is the only filter representation the pipeline passes around.
"""

from datetime import date, datetime, time, timezone
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from constants import BRAND_ALL, BRANDS
from services.data_source import Predicate
from utils.normalize import ValidationError, to_date, to_str

END_OF_DAY = time(23, 59, 59, 999000)


def _iso_millis(ts: datetime) -> str:
    """UTC timestamp in the data service's literal format: 2026-01-31T23:59:59.999Z"""
    return ts.strftime('%Y-%m-%dT%H:%M:%S.') + f"{ts.microsecond // 1000:03d}Z"


class DashboardFilters(BaseModel):
    """Canonical date range + brand filter."""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra='ignore',
    )

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    brand: Optional[str] = None

    @field_validator('date_from', 'date_to', mode='before')
    @classmethod
    def tolerant_date(cls, v):
        if v is None or isinstance(v, date):
            return v
        try:
            return to_date(v, field='date')
        except ValidationError:
            return None

    @field_validator('brand', mode='before')
    @classmethod
    def normalize_brand(cls, v):
        if not isinstance(v, str):
            return None
        key = to_str(v, lower=True)
        if key is None or key == BRAND_ALL or key not in BRANDS:
            return None
        return key

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> 'DashboardFilters':
        """Build from request query params (dateFrom/from, dateTo/to, brand)."""
        return cls(
            date_from=params.get('dateFrom') or params.get('from'),
            date_to=params.get('dateTo') or params.get('to'),
            brand=params.get('brand'),
        )

    def without_brand(self) -> 'DashboardFilters':
        return self.model_copy(update={'brand': None})

    def for_brand(self, brand: str) -> 'DashboardFilters':
        return self.model_copy(update={'brand': brand})

    # -------------------------------------------------------------------------
    # Bounds
    # -------------------------------------------------------------------------

    @property
    def start(self) -> Optional[datetime]:
        if self.date_from is None:
            return None
        return datetime.combine(self.date_from, time.min, tzinfo=timezone.utc)

    @property
    def end(self) -> Optional[datetime]:
        if self.date_to is None:
            return None
        return datetime.combine(self.date_to, END_OF_DAY, tzinfo=timezone.utc)

    # -------------------------------------------------------------------------
    # Source-level predicates
    # -------------------------------------------------------------------------

    def predicates(self, date_column: str, brand_column: Optional[str] = 'brand') -> List[Predicate]:
        """
        Translate into data-service predicates.

        Args:
            date_column: Column the date range applies to
            brand_column: Column for brand equality, or None to skip brand
        """
        preds = []
        if self.start is not None:
            preds.append(Predicate(date_column, 'gte', _iso_millis(self.start)))
        if self.end is not None:
            preds.append(Predicate(date_column, 'lte', _iso_millis(self.end)))
        if self.brand and brand_column:
            preds.append(Predicate(brand_column, 'eq', self.brand))
        return preds

    # -------------------------------------------------------------------------
    # In-memory checks (for tables joined client-side)
    # -------------------------------------------------------------------------

    def in_range(self, ts: Optional[datetime]) -> bool:
        """True if ts lies inside the date range. A missing ts never matches."""
        if ts is None:
            return False
        if self.start is not None and ts < self.start:
            return False
        if self.end is not None and ts > self.end:
            return False
        return True

    def matches_brand(self, brand_or_name: Optional[str]) -> bool:
        """Case-insensitive substring match of the brand filter against brand-or-name."""
        if not self.brand:
            return True
        return self.brand in (brand_or_name or '').lower()

    def to_log_dict(self) -> dict:
        return {
            'dateFrom': self.date_from.isoformat() if self.date_from else None,
            'dateTo': self.date_to.isoformat() if self.date_to else None,
            'brand': self.brand,
        }
