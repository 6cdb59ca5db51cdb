"""
ROI Endpoint

Endpoints:
- /roi - Cost without / with the assistant, per inquiry category
"""

from routes.analytics import analytics_bp
from routes.analytics._route_utils import respond


@analytics_bp.route("/roi", methods=["GET"])
def roi():
    return respond('roi', 'roi')
