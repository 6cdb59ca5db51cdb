"""
Analytics API Routes - Split into domain-specific modules

This package organizes the dashboard endpoints into logical domains:
- overview.py: Summary, AI quality, AI performance, trends, insights, benchmark
- deficiency.py: Deficiency tickets, NOVAC review, reports, craftsman, properties
- sentiment.py: Sentiment arcs and mail analytics
- roi.py: Cost savings
- bugs.py: Bug tracking and the review queue
- admin.py: Health endpoint

All modules share the same blueprint (analytics_bp) registered at /api.
"""

from flask import Blueprint, jsonify

from services.data_source import DataSourceError
from services.kpi import NoDataError

# Create the shared blueprint
analytics_bp = Blueprint('analytics', __name__)


@analytics_bp.errorhandler(NoDataError)
def handle_no_data(error):
    """Empty filtered result set: 404, not a crash."""
    return jsonify({"error": str(error)}), 404


@analytics_bp.errorhandler(DataSourceError)
def handle_data_source_error(error):
    """Any page failure fails the whole request with the underlying message."""
    return jsonify({"error": str(error)}), 500


# Import all route modules to register their routes with the blueprint
# Order doesn't matter since Flask routes are matched by specificity
from routes.analytics import overview
from routes.analytics import deficiency
from routes.analytics import sentiment
from routes.analytics import roi
from routes.analytics import bugs
from routes.analytics import admin
