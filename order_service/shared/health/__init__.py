from order_service.shared.health.health_check import HealthChecker
from order_service.shared.health.router import health_router

__all__ = ["HealthChecker", "health_router"]
