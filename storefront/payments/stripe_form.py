"""
Encodage des payloads imbriqués au format form-urlencoded attendu par l'API Stripe.

Exemples:
    {"mode": "payment"} -> "mode=payment"
    {"line_items": [{"quantity": 1}]} -> "line_items%5B0%5D%5Bquantity%5D=1"
"""
from typing import Any, List, Tuple
from urllib.parse import urlencode

# module storefront.payments.stripe_form


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _walk(prefix: str, value: Any, pairs: List[Tuple[str, str]]) -> None:
    if value is None:
        # Omis: l'API applique sa valeur par défaut
        return
    if isinstance(value, dict):
        for key, child in value.items():
            _walk(f"{prefix}[{key}]" if prefix else str(key), child, pairs)
        return
    if isinstance(value, (list, tuple)):
        # L'index d'origine est conservé même si des entrées sont omises
        for index, child in enumerate(value):
            _walk(f"{prefix}[{index}]", child, pairs)
        return
    pairs.append((prefix, _scalar(value)))


def flatten_form(data: dict) -> List[Tuple[str, str]]:
    """Aplati un dict imbriqué en paires (clé en notation crochets, valeur chaîne)."""
    pairs: List[Tuple[str, str]] = []
    for key, value in data.items():
        _walk(str(key), value, pairs)
    return pairs


def encode_form(data: dict) -> str:
    """
    Encode un dict imbriqué (str/int/float/bool/None/list/dict) en application/x-www-form-urlencoded.
    - Objet: a[b]; liste: p[i]; clés de premier niveau sans crochets
    - None: omis (pas de chaîne vide)
    """
    return urlencode(flatten_form(data))
