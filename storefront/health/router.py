from fastapi import APIRouter, Request

from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root(request: Request):
    """Disponibilité + état de la configuration (booléens uniquement, aucun secret)."""
    settings = request.app.state.settings
    missing = set(settings.missing_keys())
    return {
        "ok": True,
        "config": {
            "stripe": "STRIPE_SECRET_KEY" not in missing,
            "stripe_webhook": "STRIPE_WEBHOOK_SECRET" not in missing,
            "shopify": not ({"SHOPIFY_STORE_DOMAIN", "SHOPIFY_ADMIN_ACCESS_TOKEN"} & missing),
        },
        "rate_limit": rate_limit_health_info(request),
    }
