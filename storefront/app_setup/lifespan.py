"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Logge une fois les clés de configuration manquantes (Settings validé au démarrage).
- Initialise FastAPILimiter (Redis) selon settings.rate_limit_backend:
  - "redis": redis.asyncio + FastAPILimiter; en cas d'échec, rate limiting désactivé
  - "memory": fenêtre locale en mémoire (pas de Redis)
  - "disabled": aucun contrôle (tests)
"""
import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    missing = settings.missing_keys()
    if missing:
        logger.warning("Configuration incomplete, missing: %s", ", ".join(missing))

    backend = settings.rate_limit_backend
    client = None
    if backend == "redis":
        try:
            client = redis.from_url(settings.rate_limit_redis_url, encoding="utf-8", decode_responses=True)
            await FastAPILimiter.init(client)
            logger.info("Rate limiting enabled (redis)")
        except Exception as e:
            backend = "disabled"
            logger.warning(f"Rate limiting disabled due to init error: {e}")
    else:
        logger.info(f"Rate limiting backend: {backend}")
    app.state.rate_limit_backend = backend

    yield

    if client is not None:
        await client.aclose()
