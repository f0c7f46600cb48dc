"""Tests for /health, /ready, /metrics and unknown routes."""
from unittest.mock import patch


def test_health_reports_store_and_collaborators(client):
    client.post("/process-and-pay", json={"fileData": "aGVsbG8=", "fileName": "a.pdf"})
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "artifacts": 1,
        "processor_configured": True,
        "gateway_configured": True,
    }


def test_ready_when_configured(client):
    resp = client.get("/ready")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ready"}


def test_not_ready_without_gateway_key(client, gateway):
    with patch.object(gateway, "is_available", return_value=False):
        resp = client.get("/ready")
    assert resp.status_code == 503
    assert resp.json() == {"status": "not_ready", "missing": ["payment_gateway"]}


def test_metrics_exposes_artifact_counters(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "artifacts_created_total" in resp.text
    assert "artifacts_live" in resp.text


def test_unknown_route_is_structured(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json()["kind"] == "NotFound"
