import uuid
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError

from order_service.orders.exceptions import InsufficientStockError, StorageError
from order_service.orders.product_client import ProductInfoResolver
from order_service.orders.repository import OrderRepository
from order_service.orders.schemas import (
    CreateOrderRequest,
    Order,
    OrderCreatedEvent,
    OrderList,
    OrderStatus,
)
from order_service.shared.clients import RedisClient
from order_service.shared.logger import JohnWickLogger
from order_service.shared.messaging import EventPublisher
from order_service.shared.metrics.metrics_collector import MetricsCollector
from order_service.shared.metrics.metrics_schema import OrderMetrics

ORDER_CREATED_ROUTING_KEY = "order.created"
DEFAULT_ORDERS_TTL = 600
CENT = Decimal("0.01")


def orders_cache_key(product_id: UUID) -> str:
    return f"orders_by_product:{product_id}"


class OrderService:
    """
    Creates orders and serves per-product order listings.

    Creation: resolve price and stock, save, publish `order.created`, drop the
    listing cache entry. Only the save decides success; publishing and cache
    invalidation are attempted once and their failures are logged and counted.

    Listing: cache-aside over the repository with a fixed TTL.

    Holds no state besides its collaborators, so one instance serves all requests.
    """

    def __init__(
        self,
        repository: OrderRepository,
        cache: RedisClient,
        publisher: EventPublisher,
        product_resolver: ProductInfoResolver,
        events_topic: str = "orders",
        orders_ttl: int = DEFAULT_ORDERS_TTL,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.publisher = publisher
        self.product_resolver = product_resolver
        self.events_topic = events_topic
        self.orders_ttl = orders_ttl
        self.logger = logger or JohnWickLogger("OrderService")
        self.metrics = metrics or MetricsCollector(self.logger)

    async def create_order(self, request: CreateOrderRequest) -> Order:
        product = await self.product_resolver.get_product_info(request.product_id)

        if product.available_quantity < request.quantity:
            self.metrics.increment(OrderMetrics.REJECTED_STOCK)
            raise InsufficientStockError(request.product_id, request.quantity, product.available_quantity)

        total_price = (product.unit_price * request.quantity).quantize(CENT)
        order = Order(
            id=uuid.uuid4(),
            product_id=request.product_id,
            total_price=total_price,
            status=OrderStatus.PENDING,
        )

        try:
            saved = await self.repository.save(order)
        except Exception as e:
            self.logger.error("Failed to save order", extra={"order_id": str(order.id), "error": str(e)})
            raise StorageError(e) from e

        self.metrics.increment(OrderMetrics.CREATED)
        self.logger.info(
            "Order created",
            extra={"order_id": str(saved.id), "product_id": str(saved.product_id), "total_price": str(saved.total_price)},
        )

        await self._publish_created(saved, request.quantity)
        await self._invalidate_listing(request.product_id)
        return saved

    async def get_orders_by_product_id(self, product_id: UUID) -> List[Order]:
        key = orders_cache_key(product_id)

        cached = await self.cache.get(key)
        if cached is not None:
            try:
                orders = OrderList.validate_python(cached)
            except ValidationError as e:
                self.logger.warning("Ignoring unreadable orders cache entry", extra={"key": key, "error": str(e)})
            else:
                self.metrics.increment(OrderMetrics.CACHE_HIT)
                self.logger.debug("Orders cache hit", extra={"product_id": str(product_id)})
                return orders

        self.metrics.increment(OrderMetrics.CACHE_MISS)
        self.logger.debug("Orders cache miss", extra={"product_id": str(product_id)})

        orders = await self.repository.find_by_product_id(product_id)

        try:
            await self.cache.set(key, OrderList.dump_python(orders, mode="json", by_alias=True), ttl=self.orders_ttl)
        except Exception as e:
            self.metrics.increment(OrderMetrics.CACHE_POPULATE_FAILED)
            self.metrics.report()
            self.logger.warning("Failed to cache orders listing", extra={"key": key, "error": str(e)})

        return orders

    async def _publish_created(self, order: Order, quantity: int):
        event = OrderCreatedEvent.from_order(order, quantity)
        try:
            await self.publisher.publish(self.events_topic, ORDER_CREATED_ROUTING_KEY, event.to_message())
        except Exception as e:
            self.metrics.increment(OrderMetrics.PUBLISH_FAILED)
            self.metrics.report()
            self.logger.warning(
                "Order saved but order.created was not published",
                extra={"order_id": str(order.id), "topic": self.events_topic, "error": str(e)},
            )

    async def _invalidate_listing(self, product_id: UUID):
        key = orders_cache_key(product_id)
        try:
            await self.cache.delete(key)
        except Exception as e:
            self.metrics.increment(OrderMetrics.CACHE_INVALIDATE_FAILED)
            self.metrics.report()
            self.logger.warning("Failed to invalidate orders listing", extra={"key": key, "error": str(e)})
