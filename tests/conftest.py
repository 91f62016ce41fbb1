import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from order_service.orders.order_service import OrderService
from order_service.orders.product_client import ProductInfoResolver
from order_service.orders.repository import OrderRepository
from order_service.orders.schemas import Order, ProductInfo
from order_service.shared.messaging import EventPublisher

PRODUCT_P1 = UUID("a609d17d-7b24-4f40-b615-5e6f3d9a1f28")
PRODUCT_P2 = UUID("3f2b8c1e-9d4a-4e6b-8a51-0c7d2e9f4b13")


class InMemoryCache:
    """Dict-backed stand-in for RedisClient with the same JSON semantics."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.fail_set = False
        self.fail_delete = False

    async def get(self, key: str):
        value = self.store.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def set(self, key: str, value, ttl: Optional[int] = None):
        if self.fail_set:
            raise ConnectionError("cache unavailable")
        self.store[key] = json.dumps(value) if isinstance(value, (dict, list)) else value
        self.ttls[key] = ttl

    async def delete(self, key: str) -> bool:
        if self.fail_delete:
            raise ConnectionError("cache unavailable")
        self.ttls.pop(key, None)
        return self.store.pop(key, None) is not None


class SpyOrderRepository(OrderRepository):
    """Keeps orders in a list and records every call."""

    def __init__(self):
        self.orders: List[Order] = []
        self.save_calls = 0
        self.find_calls = 0
        self.save_error: Optional[Exception] = None
        self.find_error: Optional[Exception] = None

    async def save(self, order: Order) -> Order:
        self.save_calls += 1
        if self.save_error:
            raise self.save_error
        saved = order.model_copy(update={"created_at": datetime.now(timezone.utc)})
        self.orders.append(saved)
        return saved

    async def find_by_product_id(self, product_id: UUID) -> List[Order]:
        self.find_calls += 1
        if self.find_error:
            raise self.find_error
        return [o for o in self.orders if o.product_id == product_id]


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.messages = []
        self.calls = 0
        self.error: Optional[Exception] = None

    async def publish(self, topic: str, routing_key: str, body: bytes) -> None:
        self.calls += 1
        if self.error:
            raise self.error
        self.messages.append((topic, routing_key, json.loads(body)))


class StubResolver(ProductInfoResolver):
    def __init__(self):
        self.products: Dict[UUID, ProductInfo] = {}
        self.errors: Dict[UUID, Exception] = {}
        self.calls: List[UUID] = []

    async def get_product_info(self, product_id: UUID) -> ProductInfo:
        self.calls.append(product_id)
        if product_id in self.errors:
            raise self.errors[product_id]
        return self.products[product_id]


def make_product(product_id: UUID, price="100.00", qty: int = 50) -> ProductInfo:
    return ProductInfo(id=product_id, name="Test Product", price=Decimal(price), qty=qty)


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def repository():
    return SpyOrderRepository()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def resolver():
    stub = StubResolver()
    stub.products[PRODUCT_P1] = make_product(PRODUCT_P1)
    return stub


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def order_service(repository, cache, publisher, resolver, logger):
    return OrderService(
        repository=repository,
        cache=cache,
        publisher=publisher,
        product_resolver=resolver,
        events_topic="orders",
        orders_ttl=600,
        logger=logger,
    )


@pytest.fixture
def mock_order_service():
    service = MagicMock(spec=OrderService)
    service.create_order = AsyncMock()
    service.get_orders_by_product_id = AsyncMock()
    return service
