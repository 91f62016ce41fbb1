from abc import ABC, abstractmethod
from typing import Dict, Optional
from uuid import UUID

import httpx
from pydantic import ValidationError

from order_service.orders.exceptions import ConnectivityError, ProductNotFoundError, UpstreamError
from order_service.orders.schemas import ProductInfo
from order_service.shared.clients import RedisClient
from order_service.shared.logger import JohnWickLogger
from order_service.shared.metrics.metrics_collector import MetricsCollector
from order_service.shared.metrics.metrics_schema import ProductMetrics
from order_service.shared.rwlock import ReadWriteLock


def product_cache_key(product_id: UUID) -> str:
    # Same key the product service's own response cache writes (its request path)
    return f"/products/{product_id}"


class ProductInfoResolver(ABC):
    """Source of current price and stock for a product."""

    @abstractmethod
    async def get_product_info(self, product_id: UUID) -> ProductInfo:
        ...


class ProductInfoMemo:
    """
    Process-private product snapshots, consulted before the shared cache.

    Entries never expire; a price change upstream is only seen after
    `invalidate` or `clear`. Construct one per process and inject it.
    """

    def __init__(self):
        self._entries: Dict[UUID, ProductInfo] = {}
        self._lock = ReadWriteLock()

    def get(self, product_id: UUID) -> Optional[ProductInfo]:
        with self._lock.read():
            return self._entries.get(product_id)

    def put(self, product_id: UUID, product: ProductInfo):
        with self._lock.write():
            self._entries[product_id] = product

    def invalidate(self, product_id: UUID) -> bool:
        with self._lock.write():
            return self._entries.pop(product_id, None) is not None

    def clear(self):
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)


class HybridProductInfoResolver(ProductInfoResolver):
    """
    Hybrid cache read: optional local memo, then the Redis entry written by the
    product service, then one HTTP GET to the product service.

    Fetched products are never written back to Redis; the product service owns
    those entries and their TTL.
    """

    def __init__(
        self,
        cache: RedisClient,
        http_client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 5.0,
        memo: Optional[ProductInfoMemo] = None,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.cache = cache
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.memo = memo
        self.logger = logger or JohnWickLogger("ProductInfoResolver")
        self.metrics = metrics or MetricsCollector(self.logger)

    async def get_product_info(self, product_id: UUID) -> ProductInfo:
        if self.memo is not None:
            product = self.memo.get(product_id)
            if product is not None:
                self.metrics.increment(ProductMetrics.MEMO_HIT)
                return product

        product = await self._read_shared_cache(product_id)
        if product is not None:
            return product

        product = await self._fetch(product_id)
        if self.memo is not None:
            self.memo.put(product_id, product)
        return product

    async def _read_shared_cache(self, product_id: UUID) -> Optional[ProductInfo]:
        key = product_cache_key(product_id)
        cached = await self.cache.get(key)
        if cached is None:
            self.metrics.increment(ProductMetrics.CACHE_MISS)
            self.logger.debug("Product cache miss", extra={"product_id": str(product_id)})
            return None

        try:
            product = ProductInfo.model_validate(cached)
        except ValidationError as e:
            # A corrupt entry is a miss, never a failure
            self.metrics.increment(ProductMetrics.CACHE_CORRUPT)
            self.logger.warning("Ignoring unreadable product cache entry", extra={"key": key, "error": str(e)})
            return None

        self.metrics.increment(ProductMetrics.CACHE_HIT)
        self.logger.debug("Product cache hit", extra={"product_id": str(product_id)})
        return product

    async def _fetch(self, product_id: UUID) -> ProductInfo:
        url = f"{self.base_url}/products/{product_id}"
        try:
            response = await self.http_client.get(url, timeout=self.timeout)
        except httpx.RequestError as e:
            self.metrics.increment(ProductMetrics.FETCH_FAILED)
            self.metrics.report()
            self.logger.error("Product service request failed", extra={"url": url, "error": repr(e)})
            raise ConnectivityError(repr(e)) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            self.metrics.increment(ProductMetrics.FETCH_FAILED)
            self.metrics.report()
            raise ProductNotFoundError(product_id)
        if not response.is_success:
            self.metrics.increment(ProductMetrics.FETCH_FAILED)
            self.metrics.report()
            self.logger.error("Product service error", extra={"url": url, "status": response.status_code})
            raise UpstreamError(response.status_code)

        try:
            product = ProductInfo.model_validate_json(response.content)
        except ValidationError as e:
            self.metrics.increment(ProductMetrics.FETCH_FAILED)
            self.metrics.report()
            self.logger.error("Unreadable product payload", extra={"url": url, "error": str(e)})
            raise UpstreamError(response.status_code, "unreadable product payload") from e

        self.metrics.increment(ProductMetrics.FETCHED)
        self.logger.debug("Product fetched from product service", extra={"product_id": str(product_id)})
        return product
