"""
Craftsman KPI - pipeline of events that produced a deficiency report.

Output shape: {overview, pipeline, categories}
"""

from typing import Dict

from constants import RESOLVED_STATE_KEYWORDS, UNKNOWN
from services.kpi.base import AssemblerSpec, load_events, require_rows
from services.metrics import count_true, safe_percent


def is_resolved_label(label) -> bool:
    if not label:
        return False
    lowered = label.lower()
    return any(keyword in lowered for keyword in RESOLVED_STATE_KEYWORDS)


def pipeline_stages(jobs):
    stages: Dict[str, Dict[str, object]] = {}
    for job in jobs:
        label = job.deficiency_state_label or UNKNOWN
        stage = stages.get(label)
        if stage is None:
            stage = stages[label] = {
                'stateLabel': label,
                'stateCategory': job.deficiency_state_category or UNKNOWN,
                'count': 0,
            }
        stage['count'] += 1
    pipeline = list(stages.values())
    pipeline.sort(key=lambda stage: -stage['count'])
    return pipeline


def cost_by_category(jobs):
    categories: Dict[str, Dict[str, float]] = {}
    for job in jobs:
        entry = categories.setdefault(job.deficiency_category or UNKNOWN, {'count': 0, 'totalCost': 0.0})
        entry['count'] += 1
        if job.deficiency_total_cost is not None:
            entry['totalCost'] += job.deficiency_total_cost
    rows = [
        {
            'category': category,
            'count': data['count'],
            'totalCost': round(data['totalCost'], 2),
            'avgCost': round(data['totalCost'] / data['count'], 2) if data['count'] else 0,
        }
        for category, data in categories.items()
    ]
    rows.sort(key=lambda row: -row['count'])
    return rows


def assemble(source, filters):
    events = require_rows(load_events(source, filters))
    jobs = [e for e in events if e.has_deficiency_report is True]
    total_jobs = len(jobs)

    completed = sum(1 for job in jobs if is_resolved_label(job.deficiency_state_label))
    self_repaired = sum(1 for job in jobs if job.resolution_method == 'self_repaired')
    with_craftsman = count_true(job.has_craftsman for job in jobs)

    return {
        'overview': {
            'totalJobs': total_jobs,
            'completionRate': safe_percent(completed, total_jobs),
            'selfRepairCount': self_repaired,
            'selfRepairRate': safe_percent(self_repaired, total_jobs),
            'craftsmanAssignedRate': safe_percent(with_craftsman, total_jobs),
        },
        'pipeline': pipeline_stages(jobs),
        'categories': cost_by_category(jobs),
    }


SPEC = AssemblerSpec(
    endpoint_id='craftsman',
    title='Craftsman Pipeline',
    assemble=assemble,
)
