"""
Bug Tracking and Review Endpoints

Endpoints:
- /bugs/summary - Bug totals, breakdowns, weekly trend
- /bugs/clusters - Clustered bug backlog
- /review/queue - Events pending human review, newest first
- /review/stats - Review counts and correction statistics
"""

from routes.analytics import analytics_bp
from routes.analytics._route_utils import respond


@analytics_bp.route("/bugs/summary", methods=["GET"])
def bug_summary():
    return respond('bug_summary', 'bugs_summary')


@analytics_bp.route("/bugs/clusters", methods=["GET"])
def bug_clusters():
    return respond('bug_clusters', 'bugs_clusters')


@analytics_bp.route("/review/queue", methods=["GET"])
def review_queue():
    return respond('review_queue', 'review_queue')


@analytics_bp.route("/review/stats", methods=["GET"])
def review_stats():
    return respond('review_stats', 'review_stats')
