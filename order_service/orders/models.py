from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Numeric, String, Uuid

from order_service.orders.schemas import Order, OrderStatus
from order_service.shared.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True)
    product_id = Column(Uuid, nullable=False, index=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value)
    # Assigned when the row is inserted
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @classmethod
    def from_domain(cls, order: Order) -> "OrderModel":
        return cls(
            id=order.id,
            product_id=order.product_id,
            total_price=order.total_price,
            status=order.status.value,
        )

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            product_id=self.product_id,
            total_price=self.total_price,
            status=OrderStatus(self.status),
            created_at=self.created_at,
        )
