"""Redis connection pool for last-known quotes and alert change events.

Every command is bounded by socket timeouts, so a server that stops
answering surfaces as redis TimeoutError instead of a hung call.
"""
import asyncio
import redis.asyncio as redis
from pricealert.core.config import settings


# Global Redis connection pool
_redis_pool: redis.Redis | None = None
_redis_lock = asyncio.Lock()


def build_redis_client(url: str, timeout: float = None) -> redis.Redis:
    """Create a client with bounded connect and command timeouts."""
    timeout = settings.redis_socket_timeout_seconds if timeout is None else timeout
    return redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
        socket_timeout=timeout,
        socket_connect_timeout=timeout
    )


async def get_redis() -> redis.Redis:
    """Get the shared quote and alert-feed client (created once per process)."""
    global _redis_pool

    # Fast path: pool already initialized
    if _redis_pool is not None:
        return _redis_pool

    # Slow path: need to initialize with lock
    async with _redis_lock:
        # Double-check after acquiring lock
        if _redis_pool is None:
            _redis_pool = build_redis_client(settings.redis_url)
    return _redis_pool


async def close_redis():
    """Close Redis connection pool."""
    global _redis_pool
    async with _redis_lock:
        if _redis_pool:
            await _redis_pool.aclose()
            _redis_pool = None
