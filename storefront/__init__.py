"""
Storefront checkout: sessions Stripe Checkout, webhook Stripe et projection des commandes dans Shopify.
"""

__version__ = "0.1.0"
