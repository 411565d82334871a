"""
Tests for health and version endpoints
"""
from tasklog.core.constants import SERVICE_NAME


def test_health_endpoint(client):
    """Test health endpoint returns correct response"""
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "ok"
    assert data["service"] == SERVICE_NAME


def test_version_endpoint(client):
    response = client.get("/api/v1/version")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == SERVICE_NAME
    assert data["env"] == "local"
    assert data["rest_weekdays"] == [3, 4]
    assert data["submission_window_days"] == 3
