# config/rate_limit.py
import logging
from typing import Optional
from fastapi import Request
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis, from_url
from config.settings import settings
from util.functions import client_ip

logger = logging.getLogger(__name__)

_client: Optional[Redis] = None


async def _identifier(request: Request) -> str:
    peer = request.client.host if request.client else None
    return client_ip(request.headers.get("x-forwarded-for"), peer, settings.TRUST_PROXY)


async def init_rate_limiter() -> None:
    """Connect Redis and hand it to fastapi-limiter. No-op when rate limiting is off."""
    global _client
    if not settings.RATE_LIMIT_ENABLED:
        logger.info("ratelimit.disabled")
        return
    if _client is None:
        _client = from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=30,
        )
        # Fail fast on startup if Redis is unreachable.
        await _client.ping()
    await FastAPILimiter.init(_client, identifier=_identifier)
    logger.info(
        "ratelimit.ready times=%d seconds=%d",
        settings.RATE_LIMIT_TIMES,
        settings.RATE_LIMIT_SECONDS,
    )


async def close_rate_limiter() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
