from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from dropship.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/orderA", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def order_a():
        return {"ok": True}

    @app.post("/orderB", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def order_b():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=2))

    assert client.post("/orderA").status_code == 200
    assert client.post("/orderA").status_code == 200
    assert client.post("/orderA").status_code == 429


def test_rate_limit_is_per_path_and_ip(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=1))

    assert client.post("/orderA").status_code == 200
    assert client.post("/orderA").status_code == 429
    # autre chemin: compteur séparé
    assert client.post("/orderB").status_code == 200
    # autre IP (derrière proxy): compteur séparé
    assert client.post("/orderA", headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 200


def test_rate_limit_disabled_flag_allows_all(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1)
    app.state.rate_limit_enabled = False
    client = TestClient(app)
    for _ in range(3):
        assert client.post("/orderA").status_code == 200


def test_rate_limit_health_info_reports_flag():
    app = _make_app()
    app.state.rate_limit_enabled = False
    info = TestClient(app).get("/rl_info").json()
    assert info["enabled"] is False
    assert "ready" in info
