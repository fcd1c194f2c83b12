import time

from fastapi import Depends, FastAPI, Request, Response
from fastapi.testclient import TestClient
from fastapi_limiter import FastAPILimiter

from storefront.app_setup.lifespan import lifespan
from storefront.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60, app_lifespan=None):
    app = FastAPI(lifespan=app_lifespan)

    @app.post("/payments/create-intent", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def create_intent():
        return {"ok": True}

    @app.post("/shopify/create-order", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def create_order():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/payments/create-intent").status_code == 200
    assert client.post("/payments/create-intent").status_code == 200
    r3 = client.post("/payments/create-intent")
    assert r3.status_code == 429


def test_rate_limit_is_per_path(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/payments/create-intent").status_code == 200
    assert client.post("/payments/create-intent").status_code == 429

    # Chemin différent: compteur indépendant
    assert client.post("/shopify/create-order").status_code == 200
    assert client.post("/shopify/create-order").status_code == 429


def test_rate_limit_is_per_forwarded_ip(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"}).status_code == 200


def test_rate_limit_resets_after_window_sleep(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=1))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/payments/create-intent").status_code == 200
    assert client.post("/payments/create-intent").status_code == 200
    assert client.post("/payments/create-intent").status_code == 429

    # Attendre > 1s pour vider la fenêtre
    time.sleep(1.1)
    assert client.post("/payments/create-intent").status_code == 200


def test_rate_limit_disabled_flag_bypasses_limit():
    app = _make_app(times=2, seconds=60)
    client = TestClient(app)
    app.state.rate_limit_enabled = False

    for _ in range(4):
        assert client.post("/payments/create-intent").status_code == 200


def test_rate_limit_without_redis_is_a_noop(monkeypatch):
    monkeypatch.setattr(FastAPILimiter, "redis", None, raising=False)
    client = TestClient(_make_app(times=1, seconds=60))

    assert client.post("/payments/create-intent").status_code == 200
    assert client.post("/payments/create-intent").status_code == 200


def test_rate_limit_health_info(monkeypatch):
    app = _make_app()
    client = TestClient(app)
    app.state.rate_limit_enabled = True

    monkeypatch.setattr(FastAPILimiter, "redis", None, raising=False)
    info = client.get("/rl_info").json()
    assert info["enabled"] is True
    assert info["ready"] is False
    assert info["backend"] is None

    # Redis prêt: détails de connexion exposés
    monkeypatch.setattr(FastAPILimiter, "redis", object(), raising=False)
    monkeypatch.setenv("RATE_LIMIT_REDIS_URL", "redis://localhost:6379/0")
    info2 = client.get("/rl_info").json()
    assert info2["ready"] is True
    assert info2["backend"] == "redis"
    assert info2["redis"] == {"scheme": "redis", "host": "localhost", "port": 6379}


def test_fallback_store_drops_expired_clients(monkeypatch):
    app = _make_app(times=1, seconds=60)
    client = TestClient(app)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    clock = {"now": 1_000.0}
    monkeypatch.setattr("storefront.utils.rate_limit._now", lambda: clock["now"])

    assert client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.post("/shopify/create-order", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert len(app.state._rl_store) == 2

    # Fenêtre écoulée: les clés des anciens clients disparaissent au prochain appel
    clock["now"] += 61
    assert client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200
    assert list(app.state._rl_store) == ["ip:10.0.0.2:/payments/create-intent"]


def test_fallback_store_stays_bounded_under_many_clients(monkeypatch):
    app = _make_app(times=1, seconds=1)
    client = TestClient(app)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    clock = {"now": 0.0}
    monkeypatch.setattr("storefront.utils.rate_limit._now", lambda: clock["now"])

    for i in range(50):
        clock["now"] += 2
        client.post("/payments/create-intent", headers={"X-Forwarded-For": f"10.0.1.{i}"})

    assert len(app.state._rl_store) == 1


class RecordingLimiter:
    calls = []

    def __init__(self, times, seconds, identifier=None):
        self.times = times
        self.seconds = seconds
        self.identifier = identifier

    async def __call__(self, request, response):
        RecordingLimiter.calls.append((self.times, self.seconds, await self.identifier(request), response))


def test_redis_limiter_receives_request_and_response(monkeypatch):
    RecordingLimiter.calls = []
    monkeypatch.setattr(FastAPILimiter, "redis", object(), raising=False)
    monkeypatch.setattr("fastapi_limiter.depends.RateLimiter", RecordingLimiter)
    client = TestClient(_make_app(times=5, seconds=60))

    r = client.post("/payments/create-intent", headers={"X-Forwarded-For": "10.0.0.9"})

    assert r.status_code == 200
    times, seconds, key, response = RecordingLimiter.calls[0]
    assert (times, seconds, key) == (5, 60, "ip:10.0.0.9:/payments/create-intent")
    assert isinstance(response, Response)


def test_redis_limiter_blocks_after_limit_with_fake_redis(monkeypatch):
    # Sauvegarde de l'état global de FastAPILimiter (restauré par monkeypatch)
    for attr in ("redis", "prefix", "lua_sha", "identifier", "http_callback"):
        monkeypatch.setattr(FastAPILimiter, attr, getattr(FastAPILimiter, attr, None), raising=False)
    monkeypatch.setenv("USE_FAKE_REDIS_FOR_TESTS", "1")
    monkeypatch.delenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", raising=False)

    app = _make_app(times=2, seconds=60, app_lifespan=lifespan)

    with TestClient(app) as client:
        assert app.state.rate_limit_enabled is True
        codes = [client.post("/payments/create-intent").status_code for _ in range(3)]

    assert codes == [200, 200, 429]
