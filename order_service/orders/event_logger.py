import asyncio
from typing import Optional

from order_service.orders.order_service import ORDER_CREATED_ROUTING_KEY
from order_service.shared.clients import KafkaClient
from order_service.shared.logger import JohnWickLogger


class OrderCreatedEventLogger:
    """Background consumer that logs every order.created event seen on the orders topic."""

    def __init__(self, kafka_client: KafkaClient, logger: Optional[JohnWickLogger] = None):
        self.kafka_client = kafka_client
        self.logger = logger or JohnWickLogger("OrderEventLogger")
        self._task: Optional[asyncio.Task] = None

    async def run(self):
        try:
            async for topic, key, value in self.kafka_client.consume():
                if key != ORDER_CREATED_ROUTING_KEY:
                    continue
                self.logger.info("Received order.created event", extra={"topic": topic, "event": value})
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Never takes the HTTP service down
            self.logger.exception("Order event logger stopped", extra={"error": str(e)})

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="order-created-logger")
            self.logger.info("Order event logger started", extra={"topics": self.kafka_client.topics})
        return self._task

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        await self.kafka_client.stop()
