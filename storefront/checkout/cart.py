"""
Logique panier pure (pas d'appel Stripe, pas de HTTP).
"""
from typing import Any, Dict, List

import pydantic

from storefront.errors import ValidationError
from storefront.checkout.models import CartItem, CheckoutRequest
from storefront.payments.compact import METADATA_KEY, encode_compact_cart

MAX_DESCRIPTION_LENGTH = 500
MAX_DESCRIBED_OPTIONS = 4


# module storefront.checkout.cart
def _format_validation_error(exc: pydantic.ValidationError) -> str:
    err = exc.errors()[0]
    msg = str(err.get("msg") or "Invalid request payload")
    # Les ValueError levées par nos validateurs portent déjà un message complet
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    loc = ".".join(str(p) for p in err.get("loc") or ())
    return f"{loc}: {msg}" if loc else msg


def validate_checkout_payload(body: Any) -> CheckoutRequest:
    """
    Valide le body JSON {customerEmail, items, locale?}.
    - Soulève ValidationError (400) avec un message lisible au premier champ invalide.
    """
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body")
    items = body.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty array")
    try:
        return CheckoutRequest.model_validate(body)
    except pydantic.ValidationError as e:
        raise ValidationError(_format_validation_error(e))


def describe_item(item: CartItem) -> str:
    """Description lisible: "Part: <pn> | Options: a: b, c: d | Notes: ..." (500 caractères max)."""
    parts = [f"Part: {item.part_number}"]
    if item.options:
        options_desc = ", ".join(f"{o.code}: {o.value}" for o in item.options[:MAX_DESCRIBED_OPTIONS])
        parts.append(f"Options: {options_desc}")
    if item.notes:
        parts.append(f"Notes: {item.notes}")
    return " | ".join(parts)[:MAX_DESCRIPTION_LENGTH]


def to_line_items(items: List[CartItem]) -> List[Dict[str, Any]]:
    """Construit les line_items Stripe (price_data en centimes, devise en minuscules)."""
    return [
        {
            "price_data": {
                "currency": item.currency.lower(),
                "unit_amount": item.unit_price_cents,
                "product_data": {
                    "name": item.product_name,
                    "description": describe_item(item),
                },
            },
            "quantity": item.qty,
        }
        for item in items
    ]


def make_metadata(request: CheckoutRequest, items: List[CartItem]) -> Dict[str, str]:
    """Métadonnées de session: le panier compact sous la clé cart_compact."""
    return {METADATA_KEY: encode_compact_cart(items, request.customer_email)}
