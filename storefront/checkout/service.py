"""
Cas d'usage 'checkout': orchestre validation panier, panier compact et client Stripe.
"""
import logging
from typing import Any, Dict

from storefront.errors import UpstreamError, ValidationError
from storefront.checkout import cart as cart_logic
from storefront.checkout.models import CheckoutRequest
from storefront.payments.stripe_client import StripeClient

logger = logging.getLogger(__name__)


def build_session_payload(request: CheckoutRequest, site_url: str) -> Dict[str, Any]:
    """
    Payload de création de session (encodé ensuite en form-urlencoded).
    - locale None: omis par l'encodeur
    - currency: devise du premier article, à titre de référence
    - une ligne Stripe par article soumis, dans l'ordre (pas de fusion: prix et devise propres à chaque ligne)
    """
    items = request.items
    first_currency = items[0].currency if items else "EUR"
    return {
        "mode": "payment",
        "customer_email": request.customer_email,
        "success_url": f"{site_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{site_url}/cart",
        "metadata": cart_logic.make_metadata(request, items),
        "currency": first_currency.lower(),
        "line_items": cart_logic.to_line_items(items),
        "locale": request.locale,
    }


def create_checkout_session(request: CheckoutRequest, stripe: StripeClient, site_url: str) -> Dict[str, str]:
    """
    Crée la session Stripe Checkout et retourne {url, sessionId}.
    - UpstreamError si Stripe échoue ou renvoie une session sans URL
    """
    payload = build_session_payload(request, site_url)
    session = stripe.create_checkout_session(payload)
    if not session.get("url"):
        logger.error("checkout.session missing url session_id=%s", session.get("id"))
        raise UpstreamError("Invalid Stripe response")
    logger.info("checkout.session created session_id=%s items=%s", session.get("id"), len(payload["line_items"]))
    return {"url": session["url"], "sessionId": session.get("id")}


def get_checkout_status(session_id: str, stripe: StripeClient) -> Dict[str, Any]:
    """Statut d'une session: {paid, sessionId, paymentIntent}."""
    if not session_id:
        raise ValidationError("session_id is required")
    session = stripe.retrieve_checkout_session(session_id)
    return {
        "paid": session.get("payment_status") == "paid",
        "sessionId": session.get("id"),
        "paymentIntent": session.get("payment_intent"),
    }
