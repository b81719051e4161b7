import json
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app
from storefront.config import Settings
from storefront.payments.compact import encode_compact_cart
from storefront.payments.signature import compute_signature

WEBHOOK_SECRET = "whsec_test_secret"
SHOP_DOMAIN = "test-shop.myshopify.com"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeUpstream:
    """
    Faux Stripe + Shopify branché via httpx.MockTransport.
    - requests: toutes les requêtes reçues, dans l'ordre
    - overrides[(méthode, chemin)] = (status, json) pour simuler erreurs/variantes
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.customers: List[Dict[str, Any]] = []
        self.next_order_id = 5001

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.overrides:
            status, payload = self.overrides[key]
            return httpx.Response(status, json=payload)

        path = request.url.path
        if request.url.host == "api.stripe.com":
            if request.method == "POST" and path == "/v1/checkout/sessions":
                return httpx.Response(200, json={"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"})
            if request.method == "GET" and path.startswith("/v1/checkout/sessions/"):
                session_id = path.rsplit("/", 1)[-1]
                return httpx.Response(200, json={"id": session_id, "payment_status": "paid", "payment_intent": "pi_123"})
        if request.url.host == SHOP_DOMAIN:
            if path.endswith("/customers/search.json"):
                return httpx.Response(200, json={"customers": self.customers})
            if path.endswith("/customers.json"):
                body = json.loads(request.content)
                return httpx.Response(201, json={"customer": {"id": 2002, "email": body["customer"]["email"]}})
            if path.endswith("/orders.json"):
                order_id = self.next_order_id
                self.next_order_id += 1
                return httpx.Response(201, json={"order": {"id": order_id}})
        return httpx.Response(404, json={"error": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(suffix)]


def make_settings(**overrides) -> Settings:
    values = dict(
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        shopify_store_domain=SHOP_DOMAIN,
        shopify_access_token="shpat_test",
        public_site_url="https://shop.example.test",
        rate_limit_backend="disabled",
    )
    values.update(overrides)
    return Settings(**values)


def sign(body: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[str] = None) -> str:
    ts = timestamp or str(int(time.time()))
    return f"t={ts},v1={compute_signature(body, secret, ts)}"


def completed_event(items: List[Dict[str, Any]], email: Optional[str] = "buyer@example.com", event_id: str = "evt_1") -> Dict[str, Any]:
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_123",
                "customer_email": "session@example.com",
                "payment_intent": "pi_123",
                "metadata": {"cart_compact": encode_compact_cart(items, email)},
            }
        },
    }


@pytest.fixture
def cart_items() -> List[Dict[str, Any]]:
    return [
        {
            "productName": "Rail Mount",
            "partNumber": "RM-100-BLK",
            "qty": 2,
            "options": [{"code": "color", "value": "black"}, {"code": "len", "value": "300"}],
            "unitPriceCents": 1250,
            "currency": "EUR",
        },
        {
            "productName": "End Cap",
            "partNumber": "EC-20",
            "qty": 1,
            "options": [],
            "unitPriceCents": 399,
            "currency": "EUR",
            "notes": "gift wrap",
        },
    ]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings, upstream):
    return create_app(settings, http_transport=upstream.transport)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sign_payload():
    return sign


@pytest.fixture
def make_event():
    return completed_event


@pytest.fixture
def settings_factory():
    return make_settings
