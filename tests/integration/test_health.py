"""
Health, metrics and request tagging.
"""


def test_health_pings_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "healthy"


def test_metrics_reports_latency(client):
    client.get("/live")
    body = client.get("/metrics").json()
    assert body["requests"]["total"] >= 1
    assert "p95_ms" in body["latency"]


def test_request_id_is_echoed(client):
    response = client.get("/live", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time" in response.headers


def test_request_id_is_generated(client):
    response = client.get("/live")
    assert response.headers["X-Request-ID"]


def test_root_lists_products(client):
    body = client.get("/").json()
    assert body["products"]["todo"] == "/todo"
