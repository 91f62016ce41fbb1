from typing import Optional

from pydantic_settings import BaseSettings


# ----------------------------
# General / App settings
# ----------------------------
class AppSettings(BaseSettings):
    app_name: str = "order-service"
    debug: bool = False
    env_mode: str = "local"  # "local" or "docker"

    # Logger
    log_file: Optional[str] = None
    log_level: str = "INFO"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    # Background consumer that logs order.created events
    event_logger_enabled: bool = True


# ----------------------------
# Redis settings
# ----------------------------
class RedisSettings(BaseSettings):
    host_local: str = "127.0.0.1"
    host_docker: str = "redis"
    port: int = 6379
    db: int = 0

    socket_timeout: float = 2.0

    def get_host(self, env_mode: str) -> str:
        return self.host_docker if env_mode == "docker" else self.host_local

    def get_url(self, env_mode: str) -> str:
        return f"redis://{self.get_host(env_mode)}:{self.port}/{self.db}"


# ----------------------------
# Kafka settings
# ----------------------------
class KafkaSettings(BaseSettings):
    host_local: str = "127.0.0.1"
    host_docker: str = "kafka"
    port: int = 9092

    orders_topic: str = "orders"
    event_logger_group_id: str = "order-service-event-log"
    request_timeout_ms: int = 5000

    def get_host(self, env_mode: str) -> str:
        return self.host_docker if env_mode == "docker" else self.host_local

    def get_bootstrap_servers(self, env_mode: str) -> str:
        return f"{self.get_host(env_mode)}:{self.port}"


# ----------------------------
# PostgreSQL / DB settings
# ----------------------------
class PostgresSettings(BaseSettings):
    host_local: str = "127.0.0.1"
    host_docker: str = "postgres"
    port: int = 5432
    user: str = "orders"
    password: str = "orders"
    db_name: str = "orders"

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False

    def get_host(self, env_mode: str) -> str:
        return self.host_docker if env_mode == "docker" else self.host_local

    def get_database_url(self, env_mode: str) -> str:
        host = self.get_host(env_mode)
        return f"postgresql+asyncpg://{self.user}:{self.password}@{host}:{self.port}/{self.db_name}"


# ----------------------------
# Product service (upstream price/stock authority)
# ----------------------------
class ProductServiceSettings(BaseSettings):
    base_url_local: str = "http://127.0.0.1:3000"
    base_url_docker: str = "http://product-service:3000"

    # Upper bound for a single fallback fetch
    timeout_seconds: float = 5.0

    def get_base_url(self, env_mode: str) -> str:
        return self.base_url_docker if env_mode == "docker" else self.base_url_local


# ----------------------------
# Cache settings
# ----------------------------
class CacheSettings(BaseSettings):
    orders_ttl_seconds: int = 600
    # Process-private product memo consulted before Redis; never expires on its own
    local_product_memo: bool = False


# ----------------------------
# Top-level settings
# ----------------------------
class Settings(BaseSettings):
    app: AppSettings = AppSettings()
    redis: RedisSettings = RedisSettings()
    kafka: KafkaSettings = KafkaSettings()
    postgres: PostgresSettings = PostgresSettings()
    product_service: ProductServiceSettings = ProductServiceSettings()
    cache: CacheSettings = CacheSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"
