"""
Projection d'un paiement Stripe confirmé (checkout.session.completed) en commande Shopify.

Chaque étape est tolérante aux pannes: les erreurs sont loggées et reportées dans un
ProjectionResult, jamais propagées à l'appelant (le webhook répond toujours 200 pour
éviter les re-livraisons Stripe sur un système sans clé de déduplication).
"""
import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.orders.shopify_client import ShopifyClient
from storefront.payments.compact import decode_options, extract_compact_cart

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"

CREATED = "created"
SKIPPED = "skipped"
FAILED = "failed"


class ProjectionResult:
    def __init__(
        self,
        status: str,
        order_id: Optional[Any] = None,
        customer_id: Optional[Any] = None,
        reason: Optional[str] = None,
    ):
        self.status = status
        self.order_id = order_id
        self.customer_id = customer_id
        self.reason = reason

    @property
    def created(self) -> bool:
        return self.status == CREATED

    def __repr__(self) -> str:
        return f"ProjectionResult(status={self.status!r}, order_id={self.order_id!r}, reason={self.reason!r})"


def format_price(cents: Any) -> str:
    """Centimes -> prix décimal à deux chiffres ("12.50")."""
    return str((Decimal(int(cents)) / 100).quantize(Decimal("0.01")))


def has_valid_quantity(item: Any) -> bool:
    """Article compact exploitable: objet dont q est un entier >= 1."""
    if not isinstance(item, dict):
        return False
    qty = item.get("q")
    return isinstance(qty, int) and not isinstance(qty, bool) and qty >= 1


def build_line_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ligne Shopify depuis un article compact {pn, q, up, c, o, n}.
    - properties: partNumber, unit_price_cents, options_json, puis un opt_<code> par option
    - l'article doit avoir passé has_valid_quantity (pas de ligne à quantité 0)
    """
    options = decode_options(item.get("o"))
    properties: List[Dict[str, str]] = [
        {"name": "partNumber", "value": str(item.get("pn") or "")},
        {"name": "unit_price_cents", "value": str(item.get("up"))},
        {"name": "options_json", "value": json.dumps(options, separators=(",", ":"), ensure_ascii=False)},
    ]
    for opt in options:
        properties.append({"name": f"opt_{opt['code']}", "value": opt["value"]})

    return {
        "title": f"{item.get('n')} ({item.get('pn')})",
        "quantity": item["q"],
        "price": format_price(item.get("up")),
        "properties": properties,
    }


def build_order_payload(
    session: Dict[str, Any],
    items: List[Dict[str, Any]],
    email: Optional[str],
    customer: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    session_id = session.get("id")
    payment_intent = session.get("payment_intent")
    order: Dict[str, Any] = {
        "financial_status": "paid",
        "line_items": [build_line_item(it) for it in items],
        "note": f"Paid via Stripe session {session_id}, payment_intent {payment_intent or 'n/a'}",
        "note_attributes": [
            {"name": "stripe_session_id", "value": str(session_id or "")},
            {"name": "stripe_payment_intent", "value": str(payment_intent or "")},
        ],
    }
    if email:
        order["email"] = email
    if customer and customer.get("id"):
        order["customer_id"] = customer["id"]
    return order


# module storefront.orders.projector
class OrderProjector:
    def __init__(self, shopify: ShopifyClient):
        self.shopify = shopify

    def find_or_create_customer(self, email: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Recherche le client par email, sinon le crée avec le seul email.
        Lecture puis écriture sans garde d'unicité: deux livraisons concurrentes
        pour un nouveau client peuvent créer deux fiches.
        Retourne None (et logge) en cas d'échec.
        """
        if not email:
            return None
        try:
            customers = self.shopify.search_customers(email)
            if customers:
                return customers[0]
            return self.shopify.create_customer(email)
        except Exception:
            logger.exception("orders.customer upsert failed email=%s", email)
            return None

    def project(self, event: Dict[str, Any]) -> ProjectionResult:
        """
        Crée la commande Shopify pour un événement checkout.session.completed.
        - Panier compact absent/vide: skipped (toutes les sessions ne portent pas un panier)
        - Articles sans quantité entière >= 1: ignorés; si aucun ne reste, skipped
        - Échec de création: failed (loggé)
        """
        session = ((event or {}).get("data") or {}).get("object") or {}
        event_id = (event or {}).get("id")
        session_id = session.get("id")

        compact = extract_compact_cart(session.get("metadata") or {})
        items = (compact or {}).get("items") or []
        if not items:
            logger.warning("orders.project skipped reason=no_items event_id=%s session_id=%s", event_id, session_id)
            return ProjectionResult(SKIPPED, reason="no_items")

        valid_items = [it for it in items if has_valid_quantity(it)]
        if len(valid_items) < len(items):
            logger.warning(
                "orders.project dropped items without quantity event_id=%s session_id=%s dropped=%s",
                event_id, session_id, len(items) - len(valid_items),
            )
        if not valid_items:
            return ProjectionResult(SKIPPED, reason="no_valid_items")
        items = valid_items

        email = (compact or {}).get("email") or session.get("customer_email")
        customer = self.find_or_create_customer(email)
        customer_id = (customer or {}).get("id")

        try:
            order_payload = build_order_payload(session, items, email, customer)
            order = self.shopify.create_order(order_payload)
        except Exception as e:
            logger.exception(
                "orders.project failed event_id=%s session_id=%s items=%s", event_id, session_id, len(items)
            )
            return ProjectionResult(FAILED, customer_id=customer_id, reason=str(e))

        order_id = order.get("id")
        logger.info(
            "orders.project created event_id=%s session_id=%s order_id=%s customer_id=%s items=%s",
            event_id, session_id, order_id, customer_id, len(items),
        )
        return ProjectionResult(CREATED, order_id=order_id, customer_id=customer_id)
