from typing import Dict, Any, List
from urllib.parse import urlparse
import os
import time

from fastapi import Request, Response, HTTPException


def _now() -> float:
    return time.time()


def _client_key(req: Request) -> str:
    # Le bridge n'a pas de session: clé = IP (X-Forwarded-For prioritaire) + chemin
    forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = forwarded or (req.client.host if req.client else "local")
    return f"ip:{ip}:{req.url.path}"


def _purge_expired(store: Dict[str, List[float]], now: float) -> None:
    # Le store ne garde que les clés ayant encore un hit dans leur fenêtre
    for key in list(store):
        live = [expires_at for expires_at in store[key] if expires_at > now]
        if live:
            store[key] = live
        else:
            del store[key]


def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request, response: Response):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = _now()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", None)
            if store is None:
                store = {}
                request.app.state._rl_store = store
            _purge_expired(store, now)
            hits = store.get(key, [])
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now + seconds)
            store[key] = hits
            return

        # Respecter le flag global
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        from fastapi_limiter import FastAPILimiter
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        from fastapi_limiter.depends import RateLimiter

        async def _identifier(req: Request) -> str:
            return _client_key(req)

        return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    from fastapi_limiter import FastAPILimiter

    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    backend = "redis" if limiter_ready else None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if backend == "redis" and redis_url:
        p = urlparse(redis_url)
        info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}
    return info
