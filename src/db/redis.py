import logging
from redis.asyncio import Redis
from redis.exceptions import RedisError
from src.config import Config

logger = logging.getLogger(__name__)

# Initialize
redis_client = Redis.from_url(
    Config.REDIS_URL,
    decode_responses=True
)

async def check_redis_connection():
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.error("Redis connection failed: %s", e)
