from abc import ABC, abstractmethod


class EventPublisher(ABC):
    """Fire-and-forget publish primitive: one attempt, failures raise to the caller."""

    @abstractmethod
    async def publish(self, topic: str, routing_key: str, body: bytes) -> None:
        """Publish an already serialized message body under `routing_key`."""
        ...
