"""Redis connection handling"""
import redis.asyncio as redis
from fastapi import Request

from keyrelay.config import Settings


def create_redis(settings: Settings) -> redis.Redis:
    """Create the Redis client; connections are opened lazily on first command"""
    return redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis(request: Request) -> redis.Redis:
    """Dependency returning the client created in the application lifespan"""
    return request.app.state.redis
