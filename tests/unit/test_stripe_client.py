from urllib.parse import parse_qsl

import httpx
import pytest

from storefront.errors import ConfigurationError, UpstreamError
from storefront.payments.stripe_client import StripeClient


def test_requires_secret_key(settings_factory):
    with pytest.raises(ConfigurationError):
        StripeClient(settings_factory(stripe_secret_key=""))


def test_create_session_posts_form_with_bearer(settings, upstream):
    client = StripeClient(settings, transport=upstream.transport)
    session = client.create_checkout_session({"mode": "payment", "line_items": [{"quantity": 1}], "locale": None})
    assert session["id"] == "cs_test_123"

    req = upstream.requests[0]
    assert req.method == "POST"
    assert str(req.url) == "https://api.stripe.com/v1/checkout/sessions"
    assert req.headers["Authorization"] == "Bearer sk_test_123"
    assert req.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert parse_qsl(req.content.decode()) == [("mode", "payment"), ("line_items[0][quantity]", "1")]


def test_retrieve_session_quotes_id(settings, upstream):
    client = StripeClient(settings, transport=upstream.transport)
    client.retrieve_checkout_session("cs/../x")
    raw_path = upstream.requests[0].url.raw_path
    assert raw_path.startswith(b"/v1/checkout/sessions/cs")
    assert b"%2F" in raw_path


def test_error_status_raises_upstream_error(settings, upstream):
    upstream.overrides[("POST", "/v1/checkout/sessions")] = (402, {"error": {"message": "card declined"}})
    client = StripeClient(settings, transport=upstream.transport)
    with pytest.raises(UpstreamError) as exc:
        client.create_checkout_session({"mode": "payment"})
    assert exc.value.message == "Failed to create Stripe Checkout Session"
    assert exc.value.status == 402
    assert "card declined" in exc.value.body


def test_transport_error_raises_upstream_error(settings):
    def boom(request):
        raise httpx.ReadTimeout("timeout", request=request)

    client = StripeClient(settings, transport=httpx.MockTransport(boom))
    with pytest.raises(UpstreamError) as exc:
        client.retrieve_checkout_session("cs_1")
    assert exc.value.message == "Failed to fetch Stripe Checkout Session"
