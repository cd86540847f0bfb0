import logging
from typing import Optional
from redis.asyncio import Redis
from app.core.config import settings
from app.core.metrics import redis_connected

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None

async def init_redis() -> Redis:
    global redis
    try:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await redis.ping()
        redis_connected.set(1)
        logger.info("Connected to Redis")
        return redis
    except Exception as e:
        redis_connected.set(0)
        logger.error(f"Failed to connect to Redis: {e}")
        raise

def use_redis(client: Optional[Redis]) -> None:
    """Install an already-connected client (shared pools, tests)."""
    global redis
    redis = client
    redis_connected.set(1 if client is not None else 0)

async def close_redis():
    global redis
    if redis:
        await redis.aclose()
        redis = None
    redis_connected.set(0)

def get_redis() -> Redis:
    global redis
    if redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return redis
