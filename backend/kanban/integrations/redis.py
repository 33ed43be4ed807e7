from __future__ import annotations

from functools import lru_cache

import redis
from redis.asyncio import Redis as AsyncRedis

from kanban.config import settings


# Workers share one publishing connection; each listener opens its own.
@lru_cache
def get_publisher_client() -> redis.Redis:
    return redis.Redis.from_url(settings.REDIS_URL, decode_responses=True, health_check_interval=30)


def create_subscriber_client(url: str | None = None) -> AsyncRedis:
    return AsyncRedis.from_url(url or settings.REDIS_URL, decode_responses=True, health_check_interval=30)
