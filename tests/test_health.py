from fastapi import status


def test_health_reports_up(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "up"
    assert body["environment"] == "testing"
    assert {"version", "timestamp"} <= set(body)


def test_readiness_checks_database(client):
    response = client.get("/readiness")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ready", "components": {"database": "connected"}}


def test_root_points_at_api(client):
    body = client.get("/").json()
    assert body["message"] == "HR Desk API"
    assert body["api"] == "/api"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Process-Time"].endswith("ms")


def test_request_id_is_generated_when_missing(client):
    response = client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 36


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "HTTP_404"
