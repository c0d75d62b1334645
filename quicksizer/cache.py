"""
cache.py — Redis result cache for Quicksizer.

Namespace convention:
  result:{session_id}   → CostResult JSON (questionnaire + estimate)   TTL settings.result_cache_ttl

Estimates are written once and never updated, so a cached result can only
expire, never go stale. Only resolved results are cached — a "not found"
is never cached, since the questionnaire may be submitted a moment later.

Design:
  - Uses redis.asyncio (async client, part of redis-py 5.x)
  - Client created once in lifespan, stored on app.state.redis (None when disabled)
  - Helper functions take the client as a param — no module-level global state
  - Cache errors are logged and treated as a miss; the database stays authoritative
  - Logs only session_id (not result values)
"""
import logging
from typing import Optional

import redis.asyncio as aioredis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from quicksizer.config import Settings
from quicksizer.estimation.schemas import CostResult

logger = logging.getLogger(__name__)

RESULT_PREFIX = "result"


def make_result_key(session_id: str) -> str:
    """Build Redis key for a resolved cost result: result:{session_id}"""
    return f"{RESULT_PREFIX}:{session_id}"


async def create_redis_client(settings: Settings) -> Optional[aioredis.Redis]:
    """
    Create the async Redis client, or return None when REDIS_URL is empty.
    Verifies connectivity with PING before returning.
    """
    if not settings.cache_enabled:
        logger.info("Result cache disabled (REDIS_URL not set)")
        return None
    client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    await client.ping()
    logger.info("Redis result cache connected")
    return client


async def get_cached_result(
    client: Optional[aioredis.Redis], session_id: str
) -> Optional[CostResult]:
    """Return the cached CostResult, or None on miss / disabled cache / cache error."""
    if client is None:
        return None
    key = make_result_key(session_id)
    try:
        raw = await client.get(key)
    except RedisError as exc:
        logger.warning("Result cache read failed session_id=%s: %s", session_id, exc)
        return None
    if raw is None:
        return None
    try:
        result = CostResult.model_validate_json(raw)
    except PydanticValidationError:
        logger.warning("Discarding unreadable cached result session_id=%s", session_id)
        return None
    logger.info("Result cache hit session_id=%s", session_id)
    return result


async def set_cached_result(
    client: Optional[aioredis.Redis], session_id: str, result: CostResult, ttl: int
) -> None:
    """Store a resolved CostResult with the configured TTL. No-op when the cache is disabled."""
    if client is None:
        return
    key = make_result_key(session_id)
    try:
        await client.setex(key, ttl, result.model_dump_json())
    except RedisError as exc:
        logger.warning("Result cache write failed session_id=%s: %s", session_id, exc)
        return
    logger.info("Result cached session_id=%s ttl=%ds", session_id, ttl)
