"""Redis fixed-window rate limiting.

One counter per client per wall-clock minute:

    key   = "ratelimit:{client}:{unix_minute}"
    count = INCR key          (EXPIRE 60 on first hit)
    count > RATE_LIMIT_PER_MINUTE  ->  429 RateLimitError envelope

The client is the first X-Forwarded-For hop when present (reverse-proxy
aware), otherwise the socket peer. /health is never limited.
"""

import logging
import time

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from config.settings import settings
from src.pm_common.errors import RateLimitError
from src.pm_common.redis_client import get_redis
from src.pm_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECS = 60
_EXEMPT_PATHS = frozenset({"/health"})


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limit_per_minute: int | None = None) -> None:
        super().__init__(app)
        self._limit = limit_per_minute or settings.RATE_LIMIT_PER_MINUTE

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        client = client_key(request)
        window = int(time.time()) // _WINDOW_SECS
        key = f"ratelimit:{client}:{window}"

        redis = await get_redis()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECS)

        if count > self._limit:
            logger.warning("Rate limit exceeded: client=%s count=%d", client, count)
            exc = RateLimitError()
            resp = error_response(exc.code, exc.message)
            retry_after = _WINDOW_SECS - int(time.time()) % _WINDOW_SECS
            return JSONResponse(
                status_code=exc.http_status,
                content=resp.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
