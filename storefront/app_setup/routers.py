"""
Registre central des routers.
- API: checkout (session, status), webhooks Stripe
- Health
"""
from fastapi import FastAPI

from storefront.checkout import views as checkout_views
from storefront.health.router import router as health_router
from storefront.webhooks import views as webhooks_views


def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_views.router)
    app.include_router(webhooks_views.router)
    app.include_router(health_router)
