import redis.asyncio as redis

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)

redis_client = None


async def get_redis() -> redis.Redis:
    """Get Redis client (token store of the identity provider)"""
    return redis_client


async def init_redis():
    """Initialize Redis connection"""
    global redis_client
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

    # Test connection
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        raise


async def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
