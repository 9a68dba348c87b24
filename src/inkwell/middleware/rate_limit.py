"""Rate limiting middleware — Redis-based fixed window.

Learn: Each client IP gets a counter per minute, stored in Redis under
"inkwell:rl:{ip}:{bucket}:{minute}". Credential endpoints (login and
registration) share a stricter "auth" bucket to slow down password
guessing and account spraying.

Skips rate limiting entirely if Redis is unavailable (e.g. in tests).
"""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inkwell.cache import get_redis

logger = structlog.get_logger("inkwell.rate_limit")

WINDOW_SECONDS = 60

AUTH_PATHS = ("/api/v1/auth/login", "/api/v1/auth/refresh")
REGISTER_PATH = "/api/v1/users"


def is_credential_request(request: Request) -> bool:
    path = request.url.path.rstrip("/")
    if path.startswith(AUTH_PATHS):
        return True
    return request.method == "POST" and path == REGISTER_PATH


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP requests-per-minute limit."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        strict = is_credential_request(request)
        rpm = self.auth_rpm if strict else self.default_rpm
        bucket = "auth" if strict else "api"
        now = int(time.time())
        window = now // WINDOW_SECONDS
        key = f"inkwell:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS * 2)
        except RedisError as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            retry_after = WINDOW_SECONDS - now % WINDOW_SECONDS
            logger.info("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests"},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        response.headers["X-RateLimit-Bucket"] = bucket
        return response
