"""
Join Resolver - property hierarchy enrichment for deficiencies.

The data service cannot express this join for our query shapes, so it is
rebuilt in memory:

    Accommodation (portfolio, brand)
      └─ Condominium (building: address, owner)
           └─ Property (unit: apartment number)
                └─ Deficiency (ticket)

Three id-keyed lookups are built once per request and every deficiency walks
property -> condominium -> accommodation.

Broken chains never raise and never drop the row: each attribute that cannot
be resolved is set to the UNKNOWN sentinel, and the deficiency still counts in
totals. It simply will not match any brand filter.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from constants import (
    ACCOMMODATION_COLUMNS,
    ACCOMMODATIONS_TABLE,
    CONDOMINIA_TABLE,
    CONDOMINIUM_COLUMNS,
    DEFICIENCIES_TABLE,
    DEFICIENCY_COLUMNS,
    ID_ORDER,
    PROPERTIES_TABLE,
    PROPERTY_COLUMNS,
    UNKNOWN,
)
from services.fetcher import TableRequest, fetch_tables
from services.filters import DashboardFilters
from services.records import Accommodation, Condominium, Deficiency, Property

logger = logging.getLogger('kpi')


@dataclass(frozen=True)
class EnrichedDeficiency:
    """A deficiency plus the hierarchy attributes resolved for it."""
    deficiency: Deficiency
    brand: str
    building_address: str
    accommodation_id: Optional[str]
    property_owner: Optional[str]
    apartment_number: Optional[str]

    @property
    def has_unit(self) -> bool:
        return bool(self.apartment_number) and self.apartment_number != UNKNOWN


@dataclass(frozen=True)
class Hierarchy:
    """Id-keyed lookups for the three parent tables."""
    accommodations: Dict[str, Accommodation]
    condominia: Dict[str, Condominium]
    properties: Dict[str, Property]

    @classmethod
    def build(
        cls,
        accommodations: Iterable[Accommodation],
        condominia: Iterable[Condominium],
        properties: Iterable[Property],
    ) -> 'Hierarchy':
        return cls(
            accommodations={a.id: a for a in accommodations if a.id is not None},
            condominia={c.id: c for c in condominia if c.id is not None},
            properties={p.id: p for p in properties if p.id is not None},
        )

    def _brand_of(self, accommodation: Optional[Accommodation]) -> str:
        if accommodation is None:
            return UNKNOWN
        return accommodation.brand or accommodation.name or UNKNOWN

    def enrich(self, deficiency: Deficiency) -> EnrichedDeficiency:
        prop = self.properties.get(deficiency.real_estate_property_id)
        condo = self.condominia.get(prop.real_estate_condominium_id) if prop else None
        acc = self.accommodations.get(condo.accommodation_id) if condo else None

        return EnrichedDeficiency(
            deficiency=deficiency,
            brand=self._brand_of(acc),
            building_address=(condo.address or UNKNOWN) if condo else UNKNOWN,
            accommodation_id=condo.accommodation_id if condo else None,
            property_owner=condo.property_owner if condo else UNKNOWN,
            apartment_number=prop.apartment_number if prop else UNKNOWN,
        )

    def brand_of_property(self, prop: Property) -> str:
        condo = self.condominia.get(prop.real_estate_condominium_id)
        acc = self.accommodations.get(condo.accommodation_id) if condo else None
        return self._brand_of(acc)

    def count_properties(self, filters: DashboardFilters) -> int:
        """Number of units whose brand matches the brand filter (all units without one)."""
        return sum(
            1 for prop in self.properties.values()
            if filters.matches_brand(self.brand_of_property(prop))
        )


def enrich_deficiencies(
    hierarchy: Hierarchy,
    deficiencies: Iterable[Deficiency],
) -> List[EnrichedDeficiency]:
    enriched = [hierarchy.enrich(d) for d in deficiencies]
    broken = sum(1 for e in enriched if e.brand == UNKNOWN)
    if broken:
        logger.debug("hierarchy_unresolved deficiencies=%s", broken)
    return enriched


def filter_deficiencies(
    enriched: Iterable[EnrichedDeficiency],
    filters: DashboardFilters,
) -> List[EnrichedDeficiency]:
    """
    Apply brand (substring on brand-or-name) and date range (on creation time).

    Deficiencies without a creation time cannot be placed in a range and are
    always dropped.
    """
    return [
        e for e in enriched
        if filters.matches_brand(e.brand) and filters.in_range(e.deficiency.time_added)
    ]


# =============================================================================
# LOADING
# =============================================================================

def hierarchy_requests(deficiency_columns: str = DEFICIENCY_COLUMNS) -> Dict[str, TableRequest]:
    """The four independent hierarchy table fetches."""
    return {
        'accommodations': TableRequest(ACCOMMODATIONS_TABLE, Accommodation, ACCOMMODATION_COLUMNS, order=ID_ORDER),
        'condominia': TableRequest(CONDOMINIA_TABLE, Condominium, CONDOMINIUM_COLUMNS, order=ID_ORDER),
        'properties': TableRequest(PROPERTIES_TABLE, Property, PROPERTY_COLUMNS, order=ID_ORDER),
        'deficiencies': TableRequest(DEFICIENCIES_TABLE, Deficiency, deficiency_columns, order=ID_ORDER),
    }


def load_enriched_deficiencies(source, filters: DashboardFilters, extra: Optional[Dict[str, TableRequest]] = None):
    """
    Fetch the hierarchy tables in parallel, enrich and filter deficiencies.

    Args:
        source: Page source
        filters: Brand/date filters applied after enrichment
        extra: Additional independent tables to fetch in the same batch

    Returns:
        (filtered enriched deficiencies, hierarchy, extra tables by name)
    """
    requests = hierarchy_requests()
    requests.update(extra or {})
    tables = fetch_tables(source, requests)

    hierarchy = Hierarchy.build(tables['accommodations'], tables['condominia'], tables['properties'])
    enriched = enrich_deficiencies(hierarchy, tables['deficiencies'])
    extras = {name: tables[name] for name in (extra or {})}
    return filter_deficiencies(enriched, filters), hierarchy, extras
