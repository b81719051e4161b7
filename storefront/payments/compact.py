"""
Panier compact: sérialisation/désérialisation du panier transporté dans les métadonnées Stripe.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

METADATA_KEY = "cart_compact"
MAX_TOKEN_LENGTH = 4500
TRUNCATED_LENGTH = 4490
TRUNCATION_MARKER = "..."
MAX_OPTIONS_LENGTH = 200


# module storefront.payments.compact
def _get(item: Any, key: str, alias: str) -> Any:
    # Accepte un CartItem (pydantic) ou un dict brut du client
    if isinstance(item, dict):
        return item.get(alias, item.get(key))
    return getattr(item, key)


def _option_pairs(options: Iterable[Any]) -> List[str]:
    pairs: List[str] = []
    for opt in options or []:
        code = opt.get("code") if isinstance(opt, dict) else opt.code
        value = opt.get("value") if isinstance(opt, dict) else opt.value
        pairs.append(f"{code}:{value}")
    return pairs


def compact_item(item: Any) -> Dict[str, Any]:
    """
    Projette un article de panier sur la forme compacte {pn, q, up, c, o, n}.
    - o: paires "code:value" jointes par "|" et tronquées à 200 caractères
    """
    return {
        "pn": _get(item, "part_number", "partNumber"),
        "q": _get(item, "qty", "qty"),
        "up": _get(item, "unit_price_cents", "unitPriceCents"),
        "c": _get(item, "currency", "currency"),
        "o": "|".join(_option_pairs(_get(item, "options", "options")))[:MAX_OPTIONS_LENGTH],
        "n": _get(item, "product_name", "productName"),
    }


def encode_compact_cart(items: Iterable[Any], email: Optional[str]) -> str:
    """
    Sérialise le panier compact en JSON minimal.
    - Au-delà de 4500 caractères: garde les 4490 premiers + "..." (JSON volontairement invalide,
      traité comme une perte de données au décodage)
    """
    compact = json.dumps(
        {"email": email, "items": [compact_item(it) for it in items]},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    if len(compact) > MAX_TOKEN_LENGTH:
        logger.warning("payments.compact truncated length=%s", len(compact))
        compact = compact[:TRUNCATED_LENGTH] + TRUNCATION_MARKER
    return compact


def decode_compact_cart(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Désérialise un panier compact.
    - Retourne None si raw est absent, n'est pas une chaîne, ou n'est pas un objet JSON
    - Ne lève jamais d'exception vers l'appelant
    """
    if not raw or not isinstance(raw, str):
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("payments.compact unparsable length=%s", len(raw))
        return None
    if not isinstance(parsed, dict):
        return None

    items = parsed.get("items")
    parsed["items"] = [it for it in items if isinstance(it, dict)] if isinstance(items, list) else []
    return parsed


def decode_options(o: Any) -> List[Dict[str, str]]:
    """
    Ré-expand le champ "o": split sur "|" puis sur le premier ":".
    Les paires sans code ou sans valeur sont ignorées.
    """
    if not o or not isinstance(o, str):
        return []
    options: List[Dict[str, str]] = []
    for pair in o.split("|"):
        code, _, value = pair.partition(":")
        if not code or not value:
            continue
        options.append({"code": code, "value": value})
    return options


def extract_compact_cart(metadata: Any) -> Optional[Dict[str, Any]]:
    """Lit metadata["cart_compact"] d'une session Stripe et le décode."""
    if not isinstance(metadata, dict):
        return None
    return decode_compact_cart(metadata.get(METADATA_KEY))
