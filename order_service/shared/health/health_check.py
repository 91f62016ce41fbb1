import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from order_service.shared.clients import RedisClient
from order_service.shared.logger import JohnWickLogger


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthChecker:
    """Single-attempt reachability checks for Redis, PostgreSQL and Kafka."""

    def __init__(
        self,
        redis_client: RedisClient,
        engine: AsyncEngine,
        kafka_host: str,
        kafka_port: int,
        logger: Optional[JohnWickLogger] = None,
        timeout: float = 5.0,
    ):
        self.redis_client = redis_client
        self.engine = engine
        self.kafka_host = kafka_host
        self.kafka_port = kafka_port
        self.logger = logger or JohnWickLogger("HealthChecker")
        self.timeout = timeout

    async def _run(self, name: str, check) -> Dict[str, Any]:
        try:
            await asyncio.wait_for(check(), timeout=self.timeout)
        except Exception as e:
            self.logger.warning(f"{name} check failed", extra={"error": repr(e)})
            return {"status": "unhealthy", "error": repr(e), "checked_at": _now()}
        return {"status": "healthy", "checked_at": _now()}

    async def check_redis(self) -> Dict[str, Any]:
        async def _check():
            if not await self.redis_client.ping():
                raise ConnectionError("Redis did not respond to PING")

        return await self._run("Redis", _check)

    async def check_postgres(self) -> Dict[str, Any]:
        async def _check():
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        return await self._run("Postgres", _check)

    async def check_kafka(self) -> Dict[str, Any]:
        async def _check():
            _, writer = await asyncio.open_connection(self.kafka_host, self.kafka_port)
            writer.close()
            await writer.wait_closed()

        return await self._run("Kafka", _check)

    async def run_all(self, services: Optional[List[str]] = None) -> Dict[str, Any]:
        """Run all health checks (or a subset) concurrently and add a summary."""
        checks = {
            "redis": self.check_redis,
            "postgres": self.check_postgres,
            "kafka": self.check_kafka,
        }
        services = [s for s in (services or list(checks)) if s in checks]

        check_results = await asyncio.gather(*(checks[s]() for s in services))
        results: Dict[str, Any] = dict(zip(services, check_results))

        total = len(services)
        healthy = sum(1 for r in check_results if r["status"] == "healthy")
        results["summary"] = {"total": total, "healthy": healthy, "unhealthy": total - healthy}
        return results
