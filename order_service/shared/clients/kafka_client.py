import asyncio
import json
from typing import AsyncIterator, List, Optional, Sequence, Tuple, Union

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer

from order_service.shared.logger import JohnWickLogger
from order_service.shared.metrics.metrics_collector import MetricsCollector
from order_service.shared.metrics.metrics_schema import KafkaMetrics


class KafkaClient:
    """Async Kafka client: a JSON producer plus an optional consumer for the given topics."""

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str = "order-service",
        topics: Optional[List[str]] = None,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        request_timeout_ms: int = 5000,
        producer: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.topics = topics or []
        self.logger = logger or JohnWickLogger("KafkaClient")
        self.metrics = metrics or MetricsCollector(self.logger)
        self.request_timeout_ms = request_timeout_ms
        self.producer_enabled = producer

        self._producer: Optional[AIOKafkaProducer] = None
        self._consumer: Optional[AIOKafkaConsumer] = None
        self._running = False
        self._start_lock = asyncio.Lock()

    # --- Lifecycle ---
    async def start(self):
        """Start the producer (unless disabled) and, when topics were given, the consumer."""
        # Prevents trying to start the connection more than once at the same time.
        async with self._start_lock:
            if self._running:
                return

            try:
                if self.producer_enabled:
                    self._producer = AIOKafkaProducer(
                        bootstrap_servers=self.bootstrap_servers,
                        request_timeout_ms=self.request_timeout_ms,
                    )
                    await self._producer.start()
                    self.logger.info("Kafka Producer started", extra={"bootstrap_servers": self.bootstrap_servers})

                if self.topics:
                    self._consumer = AIOKafkaConsumer(
                        *self.topics,
                        bootstrap_servers=self.bootstrap_servers,
                        group_id=self.group_id,
                        auto_offset_reset="latest",
                    )
                    await self._consumer.start()
                    self.logger.info(
                        "Kafka Consumer started", extra={"group_id": self.group_id, "topics": self.topics}
                    )
            except Exception as e:
                self.logger.error("Failed to start KafkaClient", extra={"error": str(e)})
                await self._stop_members()
                raise

            self._running = True

    async def _stop_members(self):
        if self._consumer:
            await self._consumer.stop()
            self._consumer = None
            self.logger.info("Kafka Consumer stopped")
        if self._producer:
            await self._producer.stop()
            self._producer = None
            self.logger.info("Kafka Producer stopped")

    async def stop(self):
        """Stop producer and consumer."""
        if not self._running:
            return
        await self._stop_members()
        self._running = False

    # --- Produce ---
    async def produce(
        self,
        topic: str,
        value: Union[bytes, dict],
        key: str = "default",
        headers: Optional[Sequence[Tuple[str, bytes]]] = None,
    ):
        """Send one message and wait for the broker acknowledgement. Dict values are JSON encoded."""
        if not self._running:
            await self.start()
        if self._producer is None:
            raise RuntimeError("Kafka producer not enabled for this client")

        payload_bytes = value if isinstance(value, bytes) else json.dumps(value).encode("utf-8")
        try:
            await self._producer.send_and_wait(
                topic,
                payload_bytes,
                key=key.encode("utf-8"),
                headers=list(headers) if headers else None,
            )
        except Exception as e:
            self.logger.error(
                "Failed to produce message",
                extra={"topic": topic, "key": key, "error": str(e)},
            )
            self.metrics.increment(KafkaMetrics.FAILED_PRODUCE)
            self.metrics.report()
            raise

        self.metrics.increment(KafkaMetrics.PRODUCED)
        self.logger.debug("Message produced", extra={"topic": topic, "key": key})

    # --- Consume ---
    async def consume(self) -> AsyncIterator[Tuple[str, str, dict]]:
        """Async generator yielding messages as (topic, key, value). Undecodable values are skipped."""
        if not self._running:
            await self.start()
        if self._consumer is None:
            raise RuntimeError("Kafka consumer not initialized")

        try:
            async for msg in self._consumer:
                key = msg.key.decode() if msg.key else "default"
                try:
                    value = json.loads(msg.value)
                except (TypeError, ValueError) as e:
                    self.logger.warning(
                        "Skipping undecodable message", extra={"topic": msg.topic, "key": key, "error": str(e)}
                    )
                    self.metrics.increment(KafkaMetrics.FAILED_PROCESS)
                    self.metrics.report()
                    continue
                self.metrics.increment(KafkaMetrics.PROCESSED)
                yield msg.topic, key, value
        except asyncio.CancelledError:
            self.logger.info("Kafka consume task cancelled")
            raise
