"""
Order service application entrypoint.

`create_app` wires every collaborator from settings inside the FastAPI lifespan
and tears them down on shutdown.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from order_service.config import factory
from order_service.config.db_session import dispose_engine, init_db
from order_service.config.logger import configure_logging, get_logger
from order_service.config.settings import Settings
from order_service.orders.routes import router as orders_router
from order_service.shared.health import health_router
from order_service.shared.http import register_exception_handlers


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)
    logger = get_logger(settings.app.app_name, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        redis_client = factory.create_redis_client(settings)
        kafka_client = factory.create_kafka_producer_client(settings)
        http_client = factory.create_http_client(settings)
        event_logger = factory.create_event_logger(settings) if settings.app.event_logger_enabled else None

        await init_db(settings.postgres.get_database_url(settings.app.env_mode), settings.postgres)

        # Cache and broker are best-effort: the clients connect again on first use
        try:
            await redis_client.connect()
        except ConnectionError as e:
            logger.warning("Starting without Redis", extra={"error": str(e)})
        try:
            await kafka_client.start()
        except Exception as e:
            logger.warning("Starting without a Kafka producer", extra={"error": str(e)})
        if event_logger is not None:
            event_logger.start()

        app.state.order_service = factory.create_order_service(settings, redis_client, kafka_client, http_client)
        app.state.health_checker = factory.create_health_checker(settings, redis_client)
        logger.info("Order service started", extra={"env_mode": settings.app.env_mode})

        try:
            yield
        finally:
            if event_logger is not None:
                await event_logger.stop()
            await kafka_client.stop()
            await redis_client.close()
            await http_client.aclose()
            await dispose_engine()
            logger.info("Order service stopped")

    app = FastAPI(title="Order Service", debug=settings.app.debug, lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(orders_router)
    return app


def run():
    import uvicorn

    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.app.host,
        port=settings.app.port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
