"""
Dépendances FastAPI partagées: Settings (construit une fois, sur app.state) et clients HTTP.
Les clients sont construits par requête; app.state.http_transport permet d'injecter un
transport httpx (tests).
"""
from fastapi import Request

from storefront.config import Settings
from storefront.orders.projector import OrderProjector
from storefront.orders.shopify_client import ShopifyClient
from storefront.payments.stripe_client import StripeClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _transport(request: Request):
    return getattr(request.app.state, "http_transport", None)


def get_stripe_client(request: Request) -> StripeClient:
    return StripeClient(get_settings(request), transport=_transport(request))


def get_shopify_client(request: Request) -> ShopifyClient:
    return ShopifyClient(get_settings(request), transport=_transport(request))


def get_order_projector(request: Request) -> OrderProjector:
    return OrderProjector(get_shopify_client(request))
