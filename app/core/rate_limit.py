from app.core.redis import get_redis
from app.core.config import settings
from app.core.exceptions import RateLimited
from app.core.metrics import rate_limit_exceeded

async def check_rate_limit(user_id: int):
    redis = get_redis()
    key = f"rl:{user_id}"
    current = await redis.get(key)
    if current is None:
        await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
        return
    count = int(current)
    if count >= settings.RATE_LIMIT:
        rate_limit_exceeded.inc()
        raise RateLimited()
    await redis.incr(key)
