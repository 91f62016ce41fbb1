from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from order_service.orders.models import OrderModel
from order_service.orders.schemas import Order


class OrderRepository(ABC):
    """Durable storage for orders."""

    @abstractmethod
    async def save(self, order: Order) -> Order:
        """Persist a new order and return it as stored (with created_at)."""
        ...

    @abstractmethod
    async def find_by_product_id(self, product_id: UUID) -> List[Order]:
        """All orders for a product, in storage order. Empty list when there are none."""
        ...


class SqlAlchemyOrderRepository(OrderRepository):
    """OrderRepository on an async SQLAlchemy session factory (PostgreSQL via asyncpg)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save(self, order: Order) -> Order:
        async with self.session_factory() as session:
            row = OrderModel.from_domain(order)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row.to_domain()

    async def find_by_product_id(self, product_id: UUID) -> List[Order]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.product_id == product_id)
            )
            return [row.to_domain() for row in result.scalars().all()]
