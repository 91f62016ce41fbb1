class RedisMetrics:
    """Standard metric keys for RedisClient"""
    SET = "redis_set"
    GET = "redis_get"
    DEL = "redis_del"
    PING = "redis_ping"
    FAILED_SET = "redis_failed_set"
    FAILED_GET = "redis_failed_get"
    FAILED_DEL = "redis_failed_del"
    FAILED_PING = "redis_failed_ping"


class KafkaMetrics:
    """Standard metric keys for KafkaClient"""
    PRODUCED = "produced"
    FAILED_PRODUCE = "failed_produce"
    PROCESSED = "processed"
    FAILED_PROCESS = "failed_process"


class ProductMetrics:
    """Metric keys for product info resolution"""
    MEMO_HIT = "product_memo_hit"
    CACHE_HIT = "product_cache_hit"
    CACHE_MISS = "product_cache_miss"
    CACHE_CORRUPT = "product_cache_corrupt"
    FETCHED = "product_fetched"
    FETCH_FAILED = "product_fetch_failed"


class OrderMetrics:
    """Metric keys for order creation and listing, including best-effort side effects"""
    CREATED = "orders_created"
    REJECTED_STOCK = "orders_rejected_insufficient_stock"
    PUBLISH_FAILED = "order_publish_failed"
    CACHE_HIT = "orders_cache_hit"
    CACHE_MISS = "orders_cache_miss"
    CACHE_INVALIDATE_FAILED = "orders_cache_invalidate_failed"
    CACHE_POPULATE_FAILED = "orders_cache_populate_failed"
