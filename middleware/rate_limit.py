import logging
from functools import wraps

import redis
from flask import current_app, request

from utils.cache import CacheManager
from utils.errors import RateLimited
from utils.response import exception_response

logger = logging.getLogger(__name__)


def _client_address():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


# register, login and change-password draw on one bucket per client
AUTH_RATE_SCOPE = "auth"


def build_rate_limit_key(scope: str, client: str) -> str:
    return f"ratelimit:{scope}:{client}"


def auth_rate_limited(f):
    """
    Fixed-window limiter for authentication routes.

    Counts attempts per client across every auth route in Redis; once AUTH_RATE_LIMIT
    is exceeded inside AUTH_RATE_WINDOW_SECONDS the route answers 429.
    Without Redis the limiter lets every request through.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        config = current_app.config
        client = CacheManager.client()

        if not config.get('RATE_LIMIT_ENABLED') or client is None:
            return f(*args, **kwargs)

        limit = config['AUTH_RATE_LIMIT']
        window = config['AUTH_RATE_WINDOW_SECONDS']
        key = build_rate_limit_key(AUTH_RATE_SCOPE, _client_address())

        try:
            attempts = client.incr(key)
            if attempts == 1:
                client.expire(key, window)
        except redis.RedisError as e:
            logger.warning("Rate limiter unavailable: %s", e)
            return f(*args, **kwargs)

        if attempts > limit:
            try:
                retry_after = max(int(client.ttl(key)), 0)
            except redis.RedisError:
                retry_after = window
            logger.warning("Rate limit exceeded for %s", key)
            return exception_response(RateLimited(details={"retry_after": retry_after}))

        return f(*args, **kwargs)

    return decorated
