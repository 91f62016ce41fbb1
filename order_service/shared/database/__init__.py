from order_service.shared.database.base import Base

__all__ = ["Base"]
