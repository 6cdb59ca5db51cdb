"""
Properties KPI - owner roll-up of the property hierarchy view.

The view is pre-aggregated per building. Owners sum their buildings; quality
and duration averages are weighted by each building's inquiry count.
The severity x category matrix comes from events with a deficiency report.
"""

from typing import Dict, List, Optional

from constants import PROPERTY_HIERARCHY_ORDER, PROPERTY_HIERARCHY_VIEW, UNKNOWN, UNKNOWN_LABEL_DE
from services.data_source import Predicate
from services.fetcher import TableRequest, fetch_tables
from services.kpi.base import AssemblerSpec, events_request
from services.metrics import safe_percent
from services.records import PropertyHierarchyRow


class OwnerRollup:
    """Running totals for one property owner."""

    def __init__(self, brand: Optional[str]):
        self.brand = brand
        self.total_inquiries = 0
        self.deficiency_reports = 0
        self.resolved_count = 0
        self.tenant_count = 0
        self.quality_sum = 0.0
        self.quality_weight = 0
        self.duration_sum = 0.0
        self.duration_weight = 0
        self.buildings: List[Dict[str, object]] = []

    def add(self, row: PropertyHierarchyRow) -> None:
        inquiries = row.total_inquiries
        self.total_inquiries += inquiries
        self.deficiency_reports += row.deficiency_reports
        self.resolved_count += row.resolved_count
        self.tenant_count += row.tenant_count

        if row.avg_quality_score is not None:
            self.quality_sum += row.avg_quality_score * inquiries
            self.quality_weight += inquiries
        if row.avg_duration_min is not None:
            self.duration_sum += row.avg_duration_min * inquiries
            self.duration_weight += inquiries

        if row.building_address:
            self.buildings.append({
                'address': row.building_address,
                'totalInquiries': inquiries,
                'deficiencyReports': row.deficiency_reports,
                'resolvedCount': row.resolved_count,
                'tenantCount': row.tenant_count,
            })

    @staticmethod
    def _weighted(total: float, weight: int) -> Optional[float]:
        return round(total / weight, 1) if weight > 0 else None

    def to_dict(self, owner: str) -> Dict[str, object]:
        return {
            'propertyOwner': owner,
            'brand': self.brand,
            'totalInquiries': self.total_inquiries,
            'deficiencyReports': self.deficiency_reports,
            'resolvedCount': self.resolved_count,
            'resolutionRate': safe_percent(self.resolved_count, self.deficiency_reports),
            'tenantCount': self.tenant_count,
            'avgQualityScore': self._weighted(self.quality_sum, self.quality_weight),
            'avgDurationMin': self._weighted(self.duration_sum, self.duration_weight),
            'buildings': sorted(self.buildings, key=lambda b: -b['totalInquiries']),
        }


def owner_rollup(rows: List[PropertyHierarchyRow]) -> List[Dict[str, object]]:
    owners: Dict[str, OwnerRollup] = {}
    for row in rows:
        owner = row.property_owner or UNKNOWN_LABEL_DE
        if owner not in owners:
            owners[owner] = OwnerRollup(row.brand)
        owners[owner].add(row)
    result = [rollup.to_dict(owner) for owner, rollup in owners.items()]
    result.sort(key=lambda entry: -entry['totalInquiries'])
    return result


def severity_matrix(events) -> List[Dict[str, object]]:
    """[{severity, category, count}] in first-seen order."""
    cells: Dict[tuple, int] = {}
    for event in events:
        if event.has_deficiency_report is not True:
            continue
        key = (event.estimated_severity or UNKNOWN, event.deficiency_category or UNKNOWN)
        cells[key] = cells.get(key, 0) + 1
    return [
        {'severity': severity, 'category': category, 'count': count}
        for (severity, category), count in cells.items()
    ]


def assemble(source, filters):
    hierarchy_predicates = (Predicate('brand', 'eq', filters.brand),) if filters.brand else ()
    tables = fetch_tables(source, {
        'hierarchy': TableRequest(
            PROPERTY_HIERARCHY_VIEW, PropertyHierarchyRow, '*',
            predicates=hierarchy_predicates, order=PROPERTY_HIERARCHY_ORDER,
        ),
        'events': events_request(filters),
    })
    return {
        'owners': owner_rollup(tables['hierarchy']),
        'severityMatrix': severity_matrix(tables['events']),
    }


SPEC = AssemblerSpec(
    endpoint_id='properties',
    title='Property Owners',
    assemble=assemble,
)
