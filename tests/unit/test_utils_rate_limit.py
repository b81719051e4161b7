import time

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from storefront.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(backend, times=2, seconds=60):
    app = FastAPI()
    app.state.rate_limit_backend = backend

    @app.get("/limitedA", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_a():
        return {"ok": True}

    @app.get("/limitedB", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_b():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_memory_backend_blocks_after_limit():
    client = TestClient(_make_app("memory"))
    codes = [client.get("/limitedA").status_code for _ in range(3)]
    assert codes == [200, 200, 429]


def test_memory_backend_is_per_path():
    client = TestClient(_make_app("memory"))
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedB").status_code == 200


def test_memory_backend_evicts_idle_clients():
    app = _make_app("memory", seconds=60)
    now = time.time()
    app.state._rl_store = {
        "ip:10.0.0.1:/limitedA": [now - 3600],
        "ip:10.0.0.2:/limitedB": [now - 120, now - 61],
        "ip:10.0.0.3:/limitedA": [now - 5],
    }
    client = TestClient(app)
    assert client.get("/limitedA").status_code == 200

    store = app.state._rl_store
    assert "ip:10.0.0.1:/limitedA" not in store
    assert "ip:10.0.0.2:/limitedB" not in store
    assert "ip:10.0.0.3:/limitedA" in store
    assert len(store["ip:testclient:/limitedA"]) == 1


def test_disabled_backend_never_blocks():
    client = TestClient(_make_app("disabled"))
    assert all(client.get("/limitedA").status_code == 200 for _ in range(5))


def test_health_info():
    assert TestClient(_make_app("memory")).get("/rl_info").json() == {"enabled": True, "backend": "memory"}
    assert TestClient(_make_app("disabled")).get("/rl_info").json() == {"enabled": False, "backend": "disabled"}
