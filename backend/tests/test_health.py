def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert "missing_tables" in payload["database"]


def test_request_id_header_is_returned(client):
    response = client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
