"""
Bug Clusters KPI - the clustered bug backlog, ordered by status.

Clusters are not date- or brand-scoped; the filters are accepted and ignored.
"""

from constants import BUG_CLUSTERS_ORDER, BUG_CLUSTERS_TABLE
from services.fetcher import TableRequest, fetch_records
from services.kpi.base import AssemblerSpec
from services.records import BugCluster


def to_camel(cluster: BugCluster) -> dict:
    return {
        'id': cluster.id,
        'clusterLabel': cluster.cluster_label,
        'bugCategory': cluster.bug_category,
        'rootCauseDescription': cluster.root_cause_description,
        'eventCount': cluster.event_count,
        'firstSeenAt': cluster.first_seen_at,
        'lastSeenAt': cluster.last_seen_at,
        'linearParentIssueId': cluster.linear_parent_issue_id,
        'sprintReady': cluster.sprint_ready,
        'status': cluster.status,
    }


def assemble(source, filters):
    clusters = fetch_records(source, TableRequest(BUG_CLUSTERS_TABLE, BugCluster, '*', order=BUG_CLUSTERS_ORDER))
    return {'clusters': [to_camel(cluster) for cluster in clusters]}


SPEC = AssemblerSpec(
    endpoint_id='bug_clusters',
    title='Bug Clusters',
    assemble=assemble,
)
