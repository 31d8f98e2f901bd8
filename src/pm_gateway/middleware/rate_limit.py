"""Fixed-window rate limiting backed by Redis.

Each client (first X-Forwarded-For hop, else the socket peer) gets one
counter per endpoint group per minute:

    ratelimit:{client}:{group}:{window}

The auth group has its own, lower limit. A request past the limit gets a
429 ApiResponse with a Retry-After header. When Redis is unreachable the
request is let through and a warning is logged.
"""

import logging
import time

from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.pm_common.errors import RateLimitError
from src.pm_common.redis_client import get_redis
from src.pm_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_API_PREFIX = "/api/v1/"


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def endpoint_group(path: str) -> str | None:
    """First path segment under /api/v1, or None for unversioned paths."""
    if not path.startswith(_API_PREFIX):
        return None
    rest = path[len(_API_PREFIX):]
    return rest.split("/", 1)[0] or None


def limit_for(group: str) -> int:
    if group == "auth":
        return settings.RATE_LIMIT_AUTH_PER_MINUTE
    return settings.RATE_LIMIT_PER_MINUTE


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        group = endpoint_group(request.url.path)
        if not settings.RATE_LIMIT_ENABLED or group is None:
            return await call_next(request)

        now = int(time.time())
        window = now // _WINDOW_SECONDS
        key = f"ratelimit:{client_key(request)}:{group}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > limit_for(group):
            retry_after = _WINDOW_SECONDS - now % _WINDOW_SECONDS
            logger.warning(
                "Rate limit exceeded: client=%s group=%s count=%d",
                client_key(request), group, count,
            )
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message, request).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
