import pytest


@pytest.mark.anyio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_metrics_exposes_studio_counters(client):
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "assetstudio_translation_calls_total" in resp.text


@pytest.mark.anyio
async def test_request_id_is_echoed(client):
    resp = await client.get("/health", headers={"x-request-id": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"
