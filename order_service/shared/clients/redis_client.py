import asyncio
import json
from typing import Any, Optional

from redis.asyncio import Redis

from order_service.shared.logger import JohnWickLogger
from order_service.shared.metrics.metrics_collector import MetricsCollector
from order_service.shared.metrics.metrics_schema import RedisMetrics


class RedisClient:
    """
    Async Redis client with JSON values and TTL.

    Every command is attempted once. A failed GET is reported and treated as a miss;
    failed SET/DEL raise so callers decide whether the failure matters.
    """

    def __init__(
        self,
        redis_url: str,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        socket_timeout: Optional[float] = None,
    ):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.logger = logger or JohnWickLogger("RedisClient")
        self.metrics = metrics or MetricsCollector(self.logger)
        self.redis: Optional[Redis] = None
        self._connect_lock = asyncio.Lock()

    async def connect(self):
        """Create the connection pool and ping to verify connectivity."""
        async with self._connect_lock:
            if self.redis is not None:
                return
            client = Redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )
            try:
                await client.ping()
            except Exception as e:
                self.logger.error("Failed to connect to Redis", extra={"redis_url": self.redis_url, "error": str(e)})
                await client.aclose()
                raise ConnectionError(f"Cannot connect to Redis at {self.redis_url}") from e
            self.redis = client
            self.logger.info("Connected to Redis", extra={"redis_url": self.redis_url})

    async def ping(self) -> bool:
        try:
            if self.redis is None:
                await self.connect()
            result = await self.redis.ping()
            self.metrics.increment(RedisMetrics.PING)
            return bool(result)
        except Exception as e:
            self.logger.warning("Redis PING failed", extra={"redis_url": self.redis_url, "error": str(e)})
            self.metrics.increment(RedisMetrics.FAILED_PING)
            self.metrics.report()
            return False

    async def set(self, key: str, value: Any, ttl: Optional[int] = None):
        payload = json.dumps(value) if isinstance(value, (dict, list)) else value

        try:
            if self.redis is None:
                await self.connect()
            await self.redis.set(key, payload, ex=ttl)
        except Exception as e:
            self.logger.error("Redis SET failed", extra={"key": key, "error": str(e)})
            self.metrics.increment(RedisMetrics.FAILED_SET)
            self.metrics.report()
            raise
        self.metrics.increment(RedisMetrics.SET)
        self.logger.debug("Redis SET", extra={"key": key, "ttl": ttl})

    async def get(self, key: str) -> Any:
        """Return the decoded JSON value, the raw string when it is not JSON, or None on miss/failure."""
        try:
            if self.redis is None:
                await self.connect()
            value = await self.redis.get(key)
        except Exception as e:
            self.logger.error("Redis GET failed", extra={"key": key, "error": str(e)})
            self.metrics.increment(RedisMetrics.FAILED_GET)
            self.metrics.report()
            return None

        self.metrics.increment(RedisMetrics.GET)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def delete(self, key: str) -> bool:
        try:
            if self.redis is None:
                await self.connect()
            result = await self.redis.delete(key)
        except Exception as e:
            self.logger.error("Redis DEL failed", extra={"key": key, "error": str(e)})
            self.metrics.increment(RedisMetrics.FAILED_DEL)
            self.metrics.report()
            raise
        self.metrics.increment(RedisMetrics.DEL)
        self.logger.debug("Redis DEL", extra={"key": key, "deleted": bool(result)})
        return bool(result)

    async def close(self):
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis connection closed")
