"""
Factory d'application pour les entrypoints (ex: storefront.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from typing import Optional

import httpx
from fastapi import FastAPI

from storefront.config import Settings, load_settings
from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .routers import register_routers


def create_app(settings: Optional[Settings] = None, http_transport: Optional[httpx.BaseTransport] = None) -> FastAPI:
    """
    Construit l'app FastAPI:
      - Settings construit une seule fois (load_settings si non fourni) et stocké sur app.state
      - http_transport: transport httpx partagé par les clients Stripe/Shopify (tests)
      - middlewares, gestionnaires d'exceptions, routers
    """
    settings = settings or load_settings()
    app = FastAPI(title="Storefront Checkout API", lifespan=lifespan)
    app.state.settings = settings
    app.state.http_transport = http_transport
    app.state.rate_limit_backend = settings.rate_limit_backend
    register_basic_middlewares(app, settings)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
