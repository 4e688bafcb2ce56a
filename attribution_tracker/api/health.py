"""
Health check endpoints.

Provides the service status and a database connectivity check.
"""
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from attribution_tracker import __version__
from attribution_tracker.models.base import get_database

health_bp = Blueprint('health', __name__)


@health_bp.route('/', methods=['GET'])
def index():
    """
    Service status.

    Example:
        GET /

        Response:
        {
            "status": "running",
            "message": "Attribution Tracking Server",
            "timestamp": "2024-06-01T10:00:00+00:00"
        }
    """
    return jsonify({
        'status': 'running',
        'message': 'Attribution Tracking Server',
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Returns application status and database connectivity.

    Example:
        GET /health

        Response:
        {
            "status": "healthy",
            "database": "connected",
            "version": "1.0.0"
        }
    """
    status = {
        'status': 'healthy',
        'version': __version__
    }

    connected, error = get_database().check_connection()
    if connected:
        status['database'] = 'connected'
    else:
        status['database'] = 'error'
        status['database_error'] = error
        status['status'] = 'unhealthy'

    status_code = 200 if status['status'] == 'healthy' else 503

    return jsonify(status), status_code
