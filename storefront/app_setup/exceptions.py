"""
Gestionnaires d'exceptions utilisés par la factory.
- StorefrontError (ValidationError, ConfigurationError, UpstreamError, AuthenticationError) -> {"error": ...}
- HTTPException (429 du rate limiting, 404/405 du routage) -> {"error": detail}
Les détails internes (clé manquante, réponse Stripe/Shopify) sont loggés, jamais exposés.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.errors import ConfigurationError, StorefrontError, UpstreamError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        if isinstance(exc, ConfigurationError):
            logger.error("config error path=%s detail=%s", request.url.path, exc.message)
            message = ConfigurationError.public_message
        elif isinstance(exc, UpstreamError):
            logger.error("upstream error path=%s status=%s detail=%s", request.url.path, exc.status, exc.message)
            message = exc.message
        else:
            message = exc.message
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    # Couvre aussi les 404/405 du routeur Starlette, pas seulement les HTTPException FastAPI
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
