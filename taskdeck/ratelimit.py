from __future__ import annotations

import hashlib
import logging

import redis
from fastapi import Depends, HTTPException, Request

from taskdeck.auth.deps import get_current_user
from taskdeck.config import settings
from taskdeck.models.user import User
from taskdeck.redis_client import redis_client

logger = logging.getLogger(__name__)

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

def _address_key(request: Request) -> str:
    return _hash((request.client.host if request.client else "unknown").strip())

def _hit(key: str, window_seconds: int) -> int:
    pipe = redis_client.pipeline()
    pipe.incr(key)
    pipe.expire(key, window_seconds, nx=True)
    count, _ = pipe.execute()
    return int(count)

def _enforce(name: str, ident: str, limit_per_window: int, window_seconds: int) -> None:
    if not settings.rate_limit_enabled:
        return

    key = f"rl:{name}:{ident}"
    try:
        count = _hit(key, window_seconds)
    except redis.RedisError as e:
        logger.warning("rate limiter unavailable for %s: %s", name, e)
        return

    if count > limit_per_window:
        logger.info("rate limited %s key=%s count=%d", name, key, count)
        raise HTTPException(status_code=429, detail="Too many requests")

def rate_limit(name: str, limit_per_window: int, window_seconds: int, per_user: bool = False):
    """Dependency enforcing a fixed window of ``limit_per_window`` calls.

    Callers are counted per client address. With ``per_user`` they are
    counted per signed-in user instead, which requires a valid bearer token.
    Redis errors let the request through.
    """
    if per_user:

        async def _per_user(user: User = Depends(get_current_user)) -> None:
            _enforce(name, f"user:{user.id}", limit_per_window, window_seconds)

        return _per_user

    async def _per_address(request: Request) -> None:
        _enforce(name, _address_key(request), limit_per_window, window_seconds)

    return _per_address
