import uuid
from decimal import Decimal

import pytest

from order_service.orders.exceptions import (
    ConnectivityError,
    InsufficientStockError,
    ProductNotFoundError,
    StorageError,
)
from order_service.orders.order_service import ORDER_CREATED_ROUTING_KEY, orders_cache_key
from order_service.orders.schemas import CreateOrderRequest, Order, OrderStatus
from order_service.shared.metrics.metrics_schema import OrderMetrics
from tests.conftest import PRODUCT_P1, PRODUCT_P2, make_product


# --- create_order ---

@pytest.mark.asyncio
async def test_create_order_prices_saves_publishes_and_invalidates(order_service, repository, publisher, cache):
    cache.store[orders_cache_key(PRODUCT_P1)] = "[]"

    order = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=5))

    assert order.total_price == Decimal("500.00")
    assert order.status == OrderStatus.PENDING
    assert order.product_id == PRODUCT_P1
    assert order.created_at is not None
    assert repository.save_calls == 1

    assert publisher.calls == 1
    assert len(publisher.messages) == 1
    topic, routing_key, event = publisher.messages[0]
    assert topic == "orders"
    assert routing_key == ORDER_CREATED_ROUTING_KEY
    assert event["orderId"] == str(order.id)
    assert event["productId"] == str(PRODUCT_P1)
    assert event["quantityOrdered"] == 5
    assert "timestamp" in event

    assert orders_cache_key(PRODUCT_P1) not in cache.store


@pytest.mark.asyncio
async def test_create_order_generates_a_new_id_each_time(order_service):
    first = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))
    second = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))

    assert first.id != second.id


@pytest.mark.asyncio
async def test_create_order_allows_exactly_available_quantity(order_service, resolver):
    resolver.products[PRODUCT_P1] = make_product(PRODUCT_P1, price="2.50", qty=4)

    order = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=4))

    assert order.total_price == Decimal("10.00")


@pytest.mark.asyncio
async def test_create_order_insufficient_stock_writes_nothing(order_service, resolver, repository, publisher):
    resolver.products[PRODUCT_P1] = make_product(PRODUCT_P1, qty=3)

    with pytest.raises(InsufficientStockError) as exc_info:
        await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=4))

    assert exc_info.value.product_id == PRODUCT_P1
    assert str(PRODUCT_P1) in exc_info.value.message
    assert repository.save_calls == 0
    assert publisher.messages == []


@pytest.mark.asyncio
async def test_create_order_product_not_found_has_no_side_effects(order_service, resolver, repository, publisher):
    not_found = ProductNotFoundError(PRODUCT_P2)
    resolver.errors[PRODUCT_P2] = not_found

    with pytest.raises(ProductNotFoundError) as exc_info:
        await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P2, quantity=10))

    assert exc_info.value is not_found
    assert repository.save_calls == 0
    assert publisher.calls == 0


@pytest.mark.asyncio
async def test_create_order_resolver_error_propagates_unchanged(order_service, resolver):
    resolver.errors[PRODUCT_P1] = ConnectivityError("timed out")

    with pytest.raises(ConnectivityError):
        await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))


@pytest.mark.asyncio
async def test_create_order_storage_failure_is_wrapped_and_stops(order_service, repository, publisher, cache):
    cache.store[orders_cache_key(PRODUCT_P1)] = "[]"
    cause = RuntimeError("connection reset")
    repository.save_error = cause

    with pytest.raises(StorageError) as exc_info:
        await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))

    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert publisher.calls == 0
    assert orders_cache_key(PRODUCT_P1) in cache.store


@pytest.mark.asyncio
async def test_create_order_publish_failure_is_not_fatal(order_service, publisher, repository, cache, logger):
    publisher.error = ConnectionError("broker down")
    cache.store[orders_cache_key(PRODUCT_P1)] = "[]"

    order = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=2))

    assert order.total_price == Decimal("200.00")
    assert repository.orders == [order]
    assert orders_cache_key(PRODUCT_P1) not in cache.store
    assert publisher.calls == 1
    assert order_service.metrics.get(OrderMetrics.PUBLISH_FAILED) == 1
    logger.warning.assert_called()
    logger.info.assert_any_call(
        "Metrics update", extra={OrderMetrics.CREATED: 1, OrderMetrics.PUBLISH_FAILED: 1}
    )


@pytest.mark.asyncio
async def test_create_order_invalidation_failure_is_swallowed(order_service, cache):
    cache.fail_delete = True

    order = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))

    assert order.status == OrderStatus.PENDING
    assert order_service.metrics.get(OrderMetrics.CACHE_INVALIDATE_FAILED) == 1


@pytest.mark.asyncio
async def test_create_order_with_zero_quantity_is_a_zero_priced_order(order_service):
    # The HTTP layer rejects this; the service still stays total
    request = CreateOrderRequest.model_construct(product_id=PRODUCT_P1, quantity=0)

    order = await order_service.create_order(request)

    assert order.total_price == Decimal("0")


# --- get_orders_by_product_id ---

@pytest.mark.asyncio
async def test_listing_empty_store_returns_empty_list_and_caches_it(order_service, repository, cache):
    orders = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert orders == []
    assert repository.find_calls == 1
    assert cache.store[orders_cache_key(PRODUCT_P1)] == "[]"
    assert cache.ttls[orders_cache_key(PRODUCT_P1)] == 600


@pytest.mark.asyncio
async def test_listing_second_read_is_served_from_cache(order_service, repository):
    await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=3))
    await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=1))

    first = await order_service.get_orders_by_product_id(PRODUCT_P1)
    second = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert first == second
    assert [o.total_price for o in second] == [Decimal("300.00"), Decimal("100.00")]
    assert repository.find_calls == 1


@pytest.mark.asyncio
async def test_listing_after_create_misses_cache_and_sees_new_order(order_service, repository):
    assert await order_service.get_orders_by_product_id(PRODUCT_P1) == []

    order = await order_service.create_order(CreateOrderRequest(product_id=PRODUCT_P1, quantity=5))
    orders = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert orders == [order]
    assert repository.find_calls == 2


@pytest.mark.asyncio
async def test_listing_cache_hit_skips_store(order_service, repository, cache):
    cached = [
        {
            "id": "b7c8e9f0-1234-5678-9abc-def012345678",
            "productId": str(PRODUCT_P1),
            "totalPrice": 1000,
            "status": "PENDING",
            "createdAt": "2026-10-19T12:00:00+00:00",
        }
    ]
    await cache.set(orders_cache_key(PRODUCT_P1), cached)

    orders = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert len(orders) == 1
    assert orders[0].total_price == Decimal("1000")
    assert repository.find_calls == 0


@pytest.mark.asyncio
async def test_listing_malformed_cache_entry_is_a_miss(order_service, repository, cache):
    cache.store[orders_cache_key(PRODUCT_P1)] = "not json at all"

    orders = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert orders == []
    assert repository.find_calls == 1
    assert cache.store[orders_cache_key(PRODUCT_P1)] == "[]"


@pytest.mark.asyncio
async def test_listing_store_error_propagates_unchanged(order_service, repository):
    error = RuntimeError("database unavailable")
    repository.find_error = error

    with pytest.raises(RuntimeError) as exc_info:
        await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert exc_info.value is error


@pytest.mark.asyncio
async def test_listing_cache_write_failure_is_swallowed(order_service, repository, cache):
    await repository.save(Order(id=uuid.uuid4(), product_id=PRODUCT_P1, total_price=Decimal("10.00")))
    cache.fail_set = True

    orders = await order_service.get_orders_by_product_id(PRODUCT_P1)

    assert len(orders) == 1
    assert order_service.metrics.get(OrderMetrics.CACHE_POPULATE_FAILED) == 1


@pytest.mark.asyncio
async def test_listing_cache_write_failure_reports_metrics(order_service, cache, logger):
    cache.fail_set = True

    await order_service.get_orders_by_product_id(PRODUCT_P1)

    logger.info.assert_any_call(
        "Metrics update",
        extra={OrderMetrics.CACHE_MISS: 1, OrderMetrics.CACHE_POPULATE_FAILED: 1},
    )
