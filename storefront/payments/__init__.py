"""
Module 'payments' (feature-first): point d'entrée public.
Réunit panier compact, encodage form Stripe, signature webhook et client Stripe.
"""

from .compact import encode_compact_cart, decode_compact_cart, decode_options, extract_compact_cart
from .stripe_form import encode_form, flatten_form
from .signature import verify_signature, compute_signature, parse_signature_header, timing_safe_equal
from .stripe_client import StripeClient

__all__ = [
    # compact
    "encode_compact_cart",
    "decode_compact_cart",
    "decode_options",
    "extract_compact_cart",
    # form
    "encode_form",
    "flatten_form",
    # signature
    "verify_signature",
    "compute_signature",
    "parse_signature_header",
    "timing_safe_equal",
    # stripe
    "StripeClient",
]
