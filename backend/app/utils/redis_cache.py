import json
import logging
import os
from typing import Any, Optional

import redis

from app.core.config import settings
from .json_utils import dumps

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


class _NullRedis:
    """No-op Redis client used when Redis is disabled or unavailable.

    Methods mirror the minimal surface used by :class:`QueryCache` so callers
    can proceed without needing try/except around get_redis_client().
    """

    def get(self, key: str):
        return None

    def setex(self, key: str, expire: int, value: str):
        return None

    def scan_iter(self, match: Optional[str] = None):
        return iter(())

    def delete(self, *keys: str):
        return 0

    def close(self):
        return None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        url = (settings.REDIS_URL or "").strip()
        # Allow disabling via empty/none/disabled/false
        if not url or url.lower() in {"none", "disabled", "false", "0"}:
            _redis_client = _NullRedis()  # type: ignore[assignment]
            return _redis_client
        try:
            # Conservative socket timeouts so a slow Redis does not stall
            # page loads that only use it as a cache.
            _redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=float(os.getenv("REDIS_CONNECT_TIMEOUT", "0.5")),
                socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "0.5")),
            )
        except (redis.RedisError, ValueError) as exc:
            logger.warning("Redis unavailable, caching disabled: %s", exc)
            _redis_client = _NullRedis()  # type: ignore[assignment]
    return _redis_client


def close_redis_client() -> None:
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


QUERY_CACHE_PREFIX = "haulers:query"


class QueryCache:
    """Time-boxed read cache for listing/detail lookups.

    Entries are JSON documents stored under ``<prefix>:<key>`` and expire
    after ``ttl_seconds``. Redis errors are logged and treated as misses so
    a cache outage never fails a request.
    """

    def __init__(self, client: Any, ttl_seconds: int = 300, prefix: str = QUERY_CACHE_PREFIX):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Any:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Dropping undecodable cache entry %s", key)
            self.invalidate(key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.setex(self._key(key), self.ttl_seconds, dumps(value))
        except redis.RedisError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    def invalidate(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    def clear(self, pattern: str = "*") -> int:
        """Delete every entry under this cache's prefix matching ``pattern``."""
        removed = 0
        try:
            for full_key in self.client.scan_iter(match=self._key(pattern)):
                removed += self.client.delete(full_key) or 0
        except redis.RedisError as exc:
            logger.warning("Cache clear failed for %s: %s", pattern, exc)
        return removed


def get_query_cache() -> QueryCache:
    """FastAPI dependency; override in tests to inject a fake Redis."""
    return QueryCache(get_redis_client(), ttl_seconds=settings.QUERY_CACHE_TTL_SECONDS)


def business_list_key(filters: dict) -> str:
    return "businesses:" + json.dumps(filters, sort_keys=True, separators=(",", ":"))


def business_key(business_id: int) -> str:
    return f"business:{business_id}"


def provider_config_key(business_id: int) -> str:
    return f"provider_config:{business_id}"
