"""
Taxonomie des erreurs du service.
- ValidationError: entrée appelant invalide (400, message exposé)
- ConfigurationError: secret/config manquant (500, message générique, détail loggé)
- UpstreamError: appel Stripe/Shopify en échec (500, message public, détail loggé)
- AuthenticationError: signature webhook invalide (400, sans détail)
"""
from typing import Optional


class StorefrontError(Exception):
    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(StorefrontError):
    status_code = 400
    public_message = "Invalid request payload"


class ConfigurationError(StorefrontError):
    status_code = 500
    public_message = "Server misconfiguration"


class UpstreamError(StorefrontError):
    status_code = 500
    public_message = "Upstream service error"

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthenticationError(StorefrontError):
    status_code = 400
    public_message = "Signature verification failed"
