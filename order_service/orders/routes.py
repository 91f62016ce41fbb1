from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from order_service.orders.order_service import OrderService
from order_service.orders.schemas import CreateOrderRequest, Order

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order_endpoint(
    payload: CreateOrderRequest,
    service: OrderService = Depends(get_order_service),
):
    return await service.create_order(payload)


@router.get("/product/{product_id}", response_model=List[Order])
async def get_orders_by_product_endpoint(
    product_id: UUID,
    service: OrderService = Depends(get_order_service),
):
    return await service.get_orders_by_product_id(product_id)
