# module storefront.checkout.views

"""Endpoints checkout.
- POST /api/checkout/session: valide le panier, crée une session Stripe Checkout (rate-limité).
- GET /api/checkout/status: statut de paiement d'une session (page de succès).
Erreurs: ValidationError -> 400, ConfigurationError/UpstreamError -> 500 (voir app_setup.exceptions).
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from storefront.checkout import service as checkout_service
from storefront.checkout.cart import validate_checkout_payload
from storefront.dependencies import get_settings, get_stripe_client
from storefront.errors import ValidationError
from storefront.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/checkout", tags=["Checkout API"])


@router.post("/session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request):
    """
    Crée une session Checkout Stripe pour le panier envoyé par le front.
    - Entrée JSON: {customerEmail, items: CartItem[], locale?}
    - Étapes:
      1) Valider le body (400 sinon)
      2) Construire le client Stripe (500 si STRIPE_SECRET_KEY manque)
      3) Panier compact + line_items, création de session
    - Retour: {url, sessionId}
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body")

    checkout_request = validate_checkout_payload(body)
    stripe = get_stripe_client(request)
    site_url = get_settings(request).public_site_url

    result = await run_in_threadpool(
        checkout_service.create_checkout_session, checkout_request, stripe, site_url
    )
    return JSONResponse(result)


@router.get("/status")
def checkout_status(request: Request, session_id: Optional[str] = None):
    """
    Interroge Stripe pour une session donnée.
    - 400 si session_id manquant, 500 si Stripe échoue ou n'est pas configuré
    """
    if not session_id:
        raise ValidationError("session_id is required")
    stripe = get_stripe_client(request)
    return JSONResponse(checkout_service.get_checkout_status(session_id, stripe))
