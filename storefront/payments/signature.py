"""
Vérification de la signature des webhooks Stripe (en-tête Stripe-Signature).

Format: "t=<timestamp>,v1=<hex>[,v1=<hex>...]". Plusieurs v1 peuvent être présents
pendant une rotation de secret: un seul candidat valide suffit.
"""
import hashlib
import hmac
import logging
import time
from typing import List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

SIGNATURE_SCHEME = "v1"


# module storefront.payments.signature
def timing_safe_equal(a: str, b: str) -> bool:
    """
    Comparaison en temps constant: longueur d'abord, puis XOR cumulé sur tous les caractères.
    Ne s'arrête jamais au premier caractère différent.
    """
    if len(a) != len(b):
        return False
    result = 0
    for x, y in zip(a, b):
        result |= ord(x) ^ ord(y)
    return result == 0


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_signature(payload: Union[str, bytes], secret: str, timestamp: str) -> str:
    """HMAC-SHA256 (hex) de "<timestamp>.<payload>" avec le secret de signature."""
    signed = _to_bytes(str(timestamp)) + b"." + _to_bytes(payload)
    return hmac.new(_to_bytes(secret), signed, hashlib.sha256).hexdigest()


def parse_signature_header(header: Optional[str]) -> Tuple[Optional[str], List[str]]:
    """Extrait (timestamp, [candidats v1]) de l'en-tête; les paires sans clé ou valeur sont ignorées."""
    timestamp: Optional[str] = None
    candidates: List[str] = []
    for part in (header or "").split(","):
        key, _, value = part.strip().partition("=")
        if not key or not value:
            continue
        if key == "t":
            timestamp = value
        elif key == SIGNATURE_SCHEME:
            candidates.append(value)
    return timestamp, candidates


def verify_signature(
    raw_body: Union[str, bytes],
    signature_header: Optional[str],
    secret: str,
    tolerance: Optional[int] = None,
    now: Optional[float] = None,
) -> bool:
    """
    Vérifie un appel webhook. Retourne False (sans lever) si:
    - en-tête absent, t absent, aucun v1, ou aucun candidat ne correspond
    - tolerance > 0 et timestamp hors fenêtre (désactivé par défaut)
    """
    try:
        if not signature_header or not secret:
            return False
        timestamp, candidates = parse_signature_header(signature_header)
        if not timestamp or not candidates:
            return False

        if tolerance and tolerance > 0:
            try:
                ts = int(timestamp)
            except ValueError:
                return False
            current = time.time() if now is None else now
            if abs(current - ts) > tolerance:
                logger.warning("payments.signature stale timestamp=%s tolerance=%s", timestamp, tolerance)
                return False

        expected = compute_signature(raw_body, secret, timestamp)
        matched = False
        # Tous les candidats sont comparés
        for candidate in candidates:
            if timing_safe_equal(expected, candidate):
                matched = True
        return matched
    except Exception:
        logger.exception("payments.signature verification error")
        return False
