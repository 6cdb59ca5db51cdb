"""
Reports KPI - deficiency reports per portfolio, owner, building, unit,
postal code and tenant.
"""

import re
from typing import Dict, List

from constants import (
    POSTAL_CODE_PATTERN,
    TOP_TENANTS_LIMIT,
    TOP_USERS_LIMIT,
    UNKNOWN,
    UNKNOWN_LABEL_DE,
)
from services.breakdown import group_count, to_breakdown
from services.hierarchy import load_enriched_deficiencies
from services.kpi.base import AssemblerSpec
from services.metrics import safe_percent

_POSTAL_CODE = re.compile(POSTAL_CODE_PATTERN)


def postal_code(address: str):
    match = _POSTAL_CODE.search(address or '')
    return match.group(1) if match else None


def tenant_ranking(deficiencies) -> List[Dict[str, object]]:
    """Tenants by report count, keyed by phone (first name seen wins)."""
    tenants: Dict[str, Dict[str, object]] = {}
    for item in deficiencies:
        d = item.deficiency
        phone = d.tenant_phone_number or UNKNOWN
        entry = tenants.get(phone)
        if entry is None:
            tenants[phone] = {'name': d.tenant_name or UNKNOWN_LABEL_DE, 'phone': phone, 'count': 1}
        else:
            entry['count'] += 1
    ranking = list(tenants.values())
    ranking.sort(key=lambda entry: -entry['count'])
    return ranking


def assemble(source, filters):
    deficiencies, _, _ = load_enriched_deficiencies(source, filters)
    total = len(deficiencies)

    with_unit = [item for item in deficiencies if item.has_unit]
    with_postal = [item for item in deficiencies if postal_code(item.building_address)]
    tenants = tenant_ranking(deficiencies)

    return {
        'totalDeficiencies': total,
        'uniqueTenants': len(tenants),
        'uniqueBuildings': len({item.building_address for item in deficiencies}),
        'portfolioBreakdown': to_breakdown(group_count(deficiencies, lambda item: item.brand), total),
        'tenantBreakdown': tenants[:TOP_TENANTS_LIMIT],
        'topUsers': tenants[:TOP_USERS_LIMIT],
        'ownerBreakdown': to_breakdown(
            group_count(deficiencies, lambda item: item.property_owner, unknown_label=UNKNOWN_LABEL_DE),
            total,
        ),
        'buildingBreakdown': to_breakdown(group_count(deficiencies, lambda item: item.building_address), total),
        'unitBreakdown': to_breakdown(
            group_count(with_unit, lambda item: f"{item.building_address} / {item.apartment_number}"),
            total,
        ),
        'unitCoverage': safe_percent(len(with_unit), total),
        'postalCodeBreakdown': to_breakdown(
            group_count(with_postal, lambda item: postal_code(item.building_address)),
            total,
        ),
    }


SPEC = AssemblerSpec(
    endpoint_id='reports',
    title='Reporting Dimensions',
    assemble=assemble,
)
