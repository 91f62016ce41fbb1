from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, TypeAdapter
from pydantic.alias_generators import to_camel

# Decimal in memory, JSON number on the wire
Money = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"


class Order(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: UUID
    product_id: UUID
    total_price: Money
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None


class CreateOrderRequest(CamelModel):
    product_id: UUID
    quantity: int = Field(ge=1)


class ProductInfo(BaseModel):
    """Snapshot of a product as served by the product service: {id, name, price, qty}."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: UUID
    name: str = ""
    # Accepts a JSON number or a numeric string
    unit_price: Decimal = Field(alias="price", ge=0)
    available_quantity: int = Field(alias="qty", ge=0)


class OrderCreatedEvent(CamelModel):
    order_id: UUID
    product_id: UUID
    quantity_ordered: int
    timestamp: str

    @classmethod
    def from_order(cls, order: Order, quantity: int) -> "OrderCreatedEvent":
        return cls(
            order_id=order.id,
            product_id=order.product_id,
            quantity_ordered=quantity,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

    def to_message(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


OrderList = TypeAdapter(List[Order])
