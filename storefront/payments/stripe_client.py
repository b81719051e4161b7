"""
Adaptateur Stripe: appels HTTPS directs (Bearer + form-urlencoded), sans SDK.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from storefront.config import Settings
from storefront.errors import UpstreamError
from storefront.payments.stripe_form import encode_form

logger = logging.getLogger(__name__)


# module storefront.payments.stripe_client
class StripeClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Prépare un client Stripe pour une requête.
        - Soulève ConfigurationError si STRIPE_SECRET_KEY est absent.
        - transport: injectable (httpx.MockTransport en tests).
        """
        self._secret = settings.require("STRIPE_SECRET_KEY")
        self._base_url = settings.stripe_api_base
        self._timeout = settings.http_timeout_seconds
        self._transport = transport

    def _request(self, method: str, path: str, *, form: Optional[Dict[str, Any]] = None, error: str) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._secret}"}
        content = None
        if form is not None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            content = encode_form(form)
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout, transport=self._transport) as client:
                resp = client.request(method, path, headers=headers, content=content)
        except httpx.HTTPError as e:
            logger.error("stripe.request transport error method=%s path=%s error=%s", method, path, e)
            raise UpstreamError(error) from e

        if resp.is_error:
            logger.error("stripe.request failed status=%s path=%s body=%s", resp.status_code, path, resp.text)
            raise UpstreamError(error, status=resp.status_code, body=resp.text)
        try:
            return resp.json()
        except ValueError as e:
            logger.error("stripe.request invalid json path=%s", path)
            raise UpstreamError(error, status=resp.status_code, body=resp.text) from e

    def create_checkout_session(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout (POST /checkout/sessions).
        Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
        """
        return self._request(
            "POST",
            "/checkout/sessions",
            form=payload,
            error="Failed to create Stripe Checkout Session",
        )

    def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        """Récupère une session Stripe Checkout par son identifiant."""
        return self._request(
            "GET",
            f"/checkout/sessions/{quote(session_id, safe='')}",
            error="Failed to fetch Stripe Checkout Session",
        )
