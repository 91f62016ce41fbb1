from order_service.shared.messaging.base import EventPublisher
from order_service.shared.messaging.kafka_publisher import KafkaEventPublisher

__all__ = ["EventPublisher", "KafkaEventPublisher"]
