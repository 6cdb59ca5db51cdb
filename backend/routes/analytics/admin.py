"""
Admin and Health Endpoints

Endpoints:
- /health - Liveness check (never touches the data service)
- /endpoints - Registered assemblers in dashboard order
"""

from datetime import datetime, timezone

from flask import jsonify

from routes.analytics import analytics_bp
from services.kpi import list_enabled_endpoints


@analytics_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    })


@analytics_bp.route("/endpoints", methods=["GET"])
def endpoints():
    """List registered dashboard endpoints."""
    return jsonify({"endpoints": list_enabled_endpoints()})
