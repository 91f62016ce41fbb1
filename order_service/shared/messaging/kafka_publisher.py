from typing import Optional

from order_service.shared.clients import KafkaClient
from order_service.shared.logger import JohnWickLogger
from order_service.shared.messaging.base import EventPublisher

JSON_HEADERS = [("content-type", b"application/json")]


class KafkaEventPublisher(EventPublisher):
    """
    EventPublisher over KafkaClient.
    The topic maps to a Kafka topic and the routing key becomes the message key,
    so consumers can filter on it the way topic-exchange bindings would.
    """

    def __init__(self, kafka_client: KafkaClient, logger: Optional[JohnWickLogger] = None):
        self.kafka_client = kafka_client
        self.logger = logger or JohnWickLogger("KafkaEventPublisher")

    async def publish(self, topic: str, routing_key: str, body: bytes) -> None:
        await self.kafka_client.produce(topic, body, key=routing_key, headers=JSON_HEADERS)
        self.logger.debug("Event published", extra={"topic": topic, "routing_key": routing_key})
