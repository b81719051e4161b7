import time
from typing import Any, Dict
from urllib.parse import urlparse

from fastapi import HTTPException, Request, Response
from fastapi_limiter.depends import RateLimiter


def _client_key(request: Request) -> str:
    # Pas de session utilisateur sur la boutique: clé par IP et par chemin
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{request.url.path}"


async def _identifier(request: Request) -> str:
    return _client_key(request)


def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de rate limiting, pilotée par app.state.rate_limit_backend:
    - "memory": fenêtre glissante locale (app.state._rl_store)
    - "redis": fastapi-limiter (initialisé par le lifespan)
    - "disabled" (ou init Redis échouée): aucun contrôle
    """
    limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)

    async def _dep(request: Request, response: Response):
        backend = getattr(request.app.state, "rate_limit_backend", "disabled")

        if backend == "memory":
            now = time.time()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", {})
            # Purge des clés sans hit dans la fenêtre: le store reste borné aux clients actifs
            for stale in [k for k, ts in store.items() if k != key and not any(now - t < seconds for t in ts)]:
                del store[stale]
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        if backend == "redis":
            await limiter(request, response)
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    backend = getattr(request.app.state, "rate_limit_backend", "disabled")
    info: Dict[str, Any] = {"enabled": backend != "disabled", "backend": backend}
    if backend == "redis":
        settings = getattr(request.app.state, "settings", None)
        redis_url = getattr(settings, "rate_limit_redis_url", "")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}
    return info
