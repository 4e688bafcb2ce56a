"""
Tests for status and health check endpoints.

Tests / and /health endpoints.
"""
from datetime import datetime
from unittest.mock import Mock

from attribution_tracker import create_app
from attribution_tracker.models.base import Database


class TestIndexEndpoint:
    """Test / endpoint."""

    def test_index_reports_running(self, client):
        """Test index returns service name and status."""
        response = client.get('/')

        assert response.status_code == 200
        data = response.get_json()

        assert data['status'] == 'running'
        assert data['message'] == 'Attribution Tracking Server'

    def test_index_timestamp_is_iso(self, client):
        """Test index includes the current time as ISO 8601."""
        data = client.get('/').get_json()

        parsed = datetime.fromisoformat(data['timestamp'])
        assert parsed.tzinfo is not None

    def test_index_has_cors_headers(self, client):
        """Test responses allow any origin."""
        response = client.get('/')

        assert response.headers['Access-Control-Allow-Origin'] == '*'


class TestHealthEndpoint:
    """Test /health endpoint."""

    def test_health_check_success(self, client):
        """Test health check returns 200 OK."""
        response = client.get('/health')

        assert response.status_code == 200
        data = response.get_json()

        assert data['status'] == 'healthy'
        assert data['database'] == 'connected'
        assert isinstance(data['version'], str)

    def test_health_check_json_response(self, client):
        """Test health check returns JSON."""
        response = client.get('/health')

        assert response.content_type == 'application/json'

    def test_health_check_database_down(self):
        """Test health check reports 503 when the database is unreachable."""
        database = Mock(spec=Database)
        database.check_connection.return_value = (False, 'connection refused')

        app = create_app({'TESTING': True}, database=database)
        response = app.test_client().get('/health')

        assert response.status_code == 503
        data = response.get_json()
        assert data['status'] == 'unhealthy'
        assert data['database'] == 'error'
        assert data['database_error'] == 'connection refused'

    def test_health_check_uses_app_database(self):
        """Test the check runs against the handle given to create_app."""
        database = Mock(spec=Database)
        database.check_connection.return_value = (True, None)

        app = create_app({'TESTING': True}, database=database)
        database.check_connection.reset_mock()

        response = app.test_client().get('/health')

        assert response.status_code == 200
        assert response.get_json()['database'] == 'connected'
        database.check_connection.assert_called_once_with()
