"""
Accès à l'API Admin Shopify (back-office): clients et commandes, JSON sur HTTPS.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from storefront.config import Settings
from storefront.errors import UpstreamError

logger = logging.getLogger(__name__)


# module storefront.orders.shopify_client
class ShopifyClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Client Admin REST.
        - Soulève ConfigurationError si SHOPIFY_STORE_DOMAIN ou SHOPIFY_ADMIN_ACCESS_TOKEN manque.
        """
        domain = settings.require("SHOPIFY_STORE_DOMAIN")
        self._token = settings.require("SHOPIFY_ADMIN_ACCESS_TOKEN")
        self._base_url = f"https://{domain}/admin/api/{settings.shopify_api_version}"
        self._timeout = settings.http_timeout_seconds
        self._transport = transport

    def _request(self, method: str, path: str, *, params: Optional[Dict[str, str]] = None, body: Any = None) -> Dict[str, Any]:
        headers = {
            "X-Shopify-Access-Token": self._token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout, transport=self._transport) as client:
                resp = client.request(method, path, params=params, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error("shopify.request transport error method=%s path=%s error=%s", method, path, e)
            raise UpstreamError(f"Shopify API error: {e}") from e

        if resp.is_error:
            logger.error("shopify.request failed status=%s path=%s body=%s", resp.status_code, path, resp.text)
            raise UpstreamError(f"Shopify API error: {resp.status_code}", status=resp.status_code, body=resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError("Shopify API error: invalid JSON", status=resp.status_code, body=resp.text) from e

    def search_customers(self, email: str) -> List[Dict[str, Any]]:
        """GET /customers/search.json?query=email:<email>"""
        result = self._request("GET", "/customers/search.json", params={"query": f"email:{email}"})
        return result.get("customers") or []

    def create_customer(self, email: str) -> Optional[Dict[str, Any]]:
        result = self._request("POST", "/customers.json", body={"customer": {"email": email}})
        return result.get("customer")

    def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """POST /orders.json avec {"order": {...}}; retourne la commande créée."""
        result = self._request("POST", "/orders.json", body={"order": order})
        return result.get("order") or {}
