# module storefront.webhooks.views
import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from storefront.dependencies import get_order_projector, get_settings
from storefront.errors import AuthenticationError, ConfigurationError, ValidationError
from storefront.webhooks import service as webhooks_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


@router.post("/stripe", include_in_schema=False)
async def stripe_webhook(request: Request):
    """
    Webhook Stripe: consomme checkout.session.completed pour créer la commande Shopify.
    - 500 si STRIPE_WEBHOOK_SECRET n'est pas configuré
    - 400 si signature invalide ou JSON malformé
    - 200 "ok" pour tout événement accepté, y compris si la projection échoue
      (accepté mais non garanti traité: Stripe ne doit pas re-livrer)
    """
    settings = get_settings(request)
    try:
        secret = settings.require("STRIPE_WEBHOOK_SECRET")
    except ConfigurationError as e:
        logger.error("webhooks.stripe misconfigured error=%s", e)
        return PlainTextResponse("Webhook misconfigured", status_code=500)

    raw_body = await request.body()
    # Starlette normalise les noms d'en-têtes: la recherche est insensible à la casse
    sig_header = request.headers.get("stripe-signature")

    try:
        event = webhooks_service.parse_event(
            raw_body, sig_header, secret, tolerance=settings.stripe_webhook_tolerance_seconds
        )
    except AuthenticationError:
        logger.warning("webhooks.stripe invalid signature")
        return PlainTextResponse("Signature verification failed", status_code=400)
    except ValidationError:
        logger.error("webhooks.stripe invalid json length=%s", len(raw_body))
        return PlainTextResponse("Invalid JSON", status_code=400)

    try:
        projector = get_order_projector(request)
        result = await run_in_threadpool(webhooks_service.dispatch_event, event, projector)
        if result is not None:
            logger.info(
                "webhooks.stripe processed event_id=%s outcome=%s order_id=%s",
                event.get("id"), result.status, result.order_id,
            )
    except Exception:
        logger.exception("webhooks.stripe handling failed event_id=%s type=%s", event.get("id"), event.get("type"))

    return PlainTextResponse("ok", status_code=200)
