import redis

from taskdeck.config import settings
from taskdeck.db import describe_error

# short timeouts: the limiter fails open and readiness should answer quickly
redis_client = redis.Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_connect_timeout=1,
    socket_timeout=1,
)

def check_redis() -> str | None:
    try:
        if not redis_client.ping():
            return "PING returned no reply"
    except redis.RedisError as e:
        return describe_error(e)
    return None
