"""Health probes and the root banner."""


async def test_root_reports_running(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.text == "API is running"


async def test_liveness_is_always_200(failing_client):
    res = await failing_client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_ok_with_healthy_store(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ready", "checks": {"database": "healthy"}}


async def test_readiness_503_when_store_down(pool, client, monkeypatch):
    async def broken():
        return False

    monkeypatch.setattr(pool, "health_check", broken)

    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"
