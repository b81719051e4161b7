"""
Traitement des webhooks Stripe: authentification, parsing, dispatch par type.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

from storefront.errors import AuthenticationError, ValidationError
from storefront.orders.projector import CHECKOUT_SESSION_COMPLETED, OrderProjector, ProjectionResult
from storefront.payments.signature import verify_signature

logger = logging.getLogger(__name__)


def parse_event(
    raw_body: Union[str, bytes],
    signature_header: Optional[str],
    secret: str,
    tolerance: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Authentifie puis parse un événement Stripe.
    - AuthenticationError si la signature est invalide
    - ValidationError si le JSON est malformé ou n'est pas un objet
    """
    if not verify_signature(raw_body, signature_header, secret, tolerance=tolerance):
        raise AuthenticationError()
    try:
        event = json.loads(raw_body)
    except ValueError:
        raise ValidationError("Invalid JSON")
    if not isinstance(event, dict):
        raise ValidationError("Invalid JSON")
    return event


def dispatch_event(event: Dict[str, Any], projector: OrderProjector) -> Optional[ProjectionResult]:
    """
    Route l'événement selon son type.
    - checkout.session.completed: projection en commande (aucune déduplication par event id:
      une re-livraison crée une seconde commande)
    - autres types: ignorés (None)
    """
    event_type = event.get("type")
    if event_type != CHECKOUT_SESSION_COMPLETED:
        logger.info("webhooks.stripe ignored event_id=%s type=%s", event.get("id"), event_type)
        return None
    return projector.project(event)
