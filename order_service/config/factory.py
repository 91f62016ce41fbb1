import httpx

from order_service.config.db_session import get_engine, get_sessionmaker
from order_service.config.logger import get_logger
from order_service.config.settings import Settings
from order_service.orders.event_logger import OrderCreatedEventLogger
from order_service.orders.order_service import OrderService
from order_service.orders.product_client import HybridProductInfoResolver, ProductInfoMemo
from order_service.orders.repository import SqlAlchemyOrderRepository
from order_service.shared.clients import KafkaClient, RedisClient
from order_service.shared.health import HealthChecker
from order_service.shared.messaging import KafkaEventPublisher
from order_service.shared.metrics.metrics_collector import MetricsCollector


# ----------------------------
# Redis client factory
# ----------------------------
def create_redis_client(settings: Settings) -> RedisClient:
    return RedisClient(
        redis_url=settings.redis.get_url(settings.app.env_mode),
        logger=get_logger("RedisClient", settings),
        socket_timeout=settings.redis.socket_timeout,
    )


# ----------------------------
# Kafka client factories
# ----------------------------
def create_kafka_producer_client(settings: Settings) -> KafkaClient:
    return KafkaClient(
        bootstrap_servers=settings.kafka.get_bootstrap_servers(settings.app.env_mode),
        logger=get_logger("KafkaClient", settings),
        request_timeout_ms=settings.kafka.request_timeout_ms,
    )


def create_event_logger(settings: Settings) -> OrderCreatedEventLogger:
    consumer = KafkaClient(
        bootstrap_servers=settings.kafka.get_bootstrap_servers(settings.app.env_mode),
        group_id=settings.kafka.event_logger_group_id,
        topics=[settings.kafka.orders_topic],
        logger=get_logger("KafkaConsumer", settings),
        request_timeout_ms=settings.kafka.request_timeout_ms,
        producer=False,
    )
    return OrderCreatedEventLogger(consumer, logger=get_logger("OrderEventLogger", settings))


# ----------------------------
# Product service HTTP client
# ----------------------------
def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.product_service.timeout_seconds))


# ----------------------------
# Order service (the orchestrator) and its collaborators
# ----------------------------
def create_order_service(
    settings: Settings,
    redis_client: RedisClient,
    kafka_client: KafkaClient,
    http_client: httpx.AsyncClient,
) -> OrderService:
    memo = ProductInfoMemo() if settings.cache.local_product_memo else None
    resolver_logger = get_logger("ProductInfoResolver", settings)
    resolver = HybridProductInfoResolver(
        cache=redis_client,
        http_client=http_client,
        base_url=settings.product_service.get_base_url(settings.app.env_mode),
        timeout=settings.product_service.timeout_seconds,
        memo=memo,
        logger=resolver_logger,
        metrics=MetricsCollector(resolver_logger),
    )

    database_url = settings.postgres.get_database_url(settings.app.env_mode)
    repository = SqlAlchemyOrderRepository(get_sessionmaker(database_url, settings.postgres))

    service_logger = get_logger("OrderService", settings)
    return OrderService(
        repository=repository,
        cache=redis_client,
        publisher=KafkaEventPublisher(kafka_client, logger=get_logger("KafkaEventPublisher", settings)),
        product_resolver=resolver,
        events_topic=settings.kafka.orders_topic,
        orders_ttl=settings.cache.orders_ttl_seconds,
        logger=service_logger,
        metrics=MetricsCollector(service_logger),
    )


def create_health_checker(settings: Settings, redis_client: RedisClient) -> HealthChecker:
    database_url = settings.postgres.get_database_url(settings.app.env_mode)
    return HealthChecker(
        redis_client=redis_client,
        engine=get_engine(database_url, settings.postgres),
        kafka_host=settings.kafka.get_host(settings.app.env_mode),
        kafka_port=settings.kafka.port,
        logger=get_logger("HealthChecker", settings),
    )
