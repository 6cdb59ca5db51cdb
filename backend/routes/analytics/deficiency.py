"""
Deficiency Endpoints - tickets enriched through the property hierarchy.

Endpoints:
- /deficiency - Categories, states, trends, closing times
- /novac - NOVAC portfolio review (always NOVAC-scoped)
- /reports - Portfolio / owner / building / unit / tenant dimensions
- /craftsman - Craftsman pipeline from events with a deficiency report
- /properties - Owner roll-up of the property hierarchy view
"""

from routes.analytics import analytics_bp
from routes.analytics._route_utils import respond


@analytics_bp.route("/deficiency", methods=["GET"])
def deficiency():
    return respond('deficiency', 'deficiency')


@analytics_bp.route("/novac", methods=["GET"])
def novac():
    return respond('novac', 'novac')


@analytics_bp.route("/reports", methods=["GET"])
def reports():
    return respond('reports', 'reports')


@analytics_bp.route("/craftsman", methods=["GET"])
def craftsman():
    return respond('craftsman', 'craftsman')


@analytics_bp.route("/properties", methods=["GET"])
def properties():
    return respond('properties', 'properties')
