import logging
from typing import Optional

import redis.exceptions

logger = logging.getLogger(__name__)
CACHE_TTL = 86400


def cache_key(short_code: str) -> str:
    return f"url:{short_code}"


class RedisURLCache:
    """Redirect cache: short code -> original URL.

    Never authoritative. Redis failures are logged and treated as a miss.
    """

    def __init__(self, client, ttl: int = CACHE_TTL):
        self.client = client
        self.ttl = ttl

    def get(self, short_code: str) -> Optional[str]:
        try:
            cached_url = self.client.get(cache_key(short_code))
        except redis.exceptions.RedisError:
            logger.warning(f"Redis unavailable, cache lookup skipped for {short_code}")
            return None

        if not cached_url:
            return None

        if isinstance(cached_url, (bytes, bytearray)):
            cached_url = cached_url.decode()
        logger.info(f"Redirect cache HIT for {short_code} -> {cached_url[:50]}")
        return cached_url

    def put(self, short_code: str, original_url: str, seconds_left: Optional[int] = None):
        ttl = self.ttl if seconds_left is None else min(self.ttl, seconds_left)
        if ttl <= 0:
            return
        try:
            self.client.setex(cache_key(short_code), ttl, original_url)
            logger.debug(f"Cached {short_code} -> {original_url[:50]} for {ttl}s")
        except redis.exceptions.RedisError:
            logger.warning(f"Failed to cache {short_code}, Redis unavailable")

    def evict(self, short_code: str):
        try:
            self.client.delete(cache_key(short_code))
        except redis.exceptions.RedisError:
            logger.warning(f"Failed to evict {short_code} from cache, Redis unavailable")
