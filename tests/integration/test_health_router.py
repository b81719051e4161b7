from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app


def test_health_reports_config(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "ok": True,
        "config": {"stripe": True, "stripe_webhook": True, "shopify": True},
        "rate_limit": {"enabled": False, "backend": "disabled"},
    }
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_health_reports_missing_config(settings_factory):
    app = create_app(settings_factory(shopify_store_domain="", stripe_secret_key=""))
    with TestClient(app) as c:
        config = c.get("/health").json()["config"]
    assert config == {"stripe": False, "stripe_webhook": True, "shopify": False}


def test_unknown_path_returns_json_error(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_wrong_method_returns_json_error(client):
    resp = client.get("/api/webhooks/stripe")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed"}
    assert resp.headers["allow"] == "POST"
