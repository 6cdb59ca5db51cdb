"""
Sentiment Endpoint

Endpoints:
- /stimmung - Tenant sentiment arcs plus craftsman mail analytics
"""

from routes.analytics import analytics_bp
from routes.analytics._route_utils import respond


@analytics_bp.route("/stimmung", methods=["GET"])
def stimmung():
    return respond('stimmung', 'stimmung')
