from datetime import datetime
from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import (
    OrderStatusEnum,
    PaymentStatusEnum,
    ShippingStatusEnum,
    UpdateOrderRequest,
)
from .service import OrderService

orders_router = APIRouter()


@orders_router.get("/")
@require_permission(Resource.ORDERS, Action.READ)
async def list_orders(
    request: Request,
    status: Optional[OrderStatusEnum] = Query(None),
    payment_status: Optional[PaymentStatusEnum] = Query(None),
    shipping_status: Optional[ShippingStatusEnum] = Query(None),
    user_id: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Order number, tracking number or customer email"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = OrderService(db)
    orders, total = await svc.list_orders(
        status_filter=status.value if status else None,
        payment_status=payment_status.value if payment_status else None,
        shipping_status=shipping_status.value if shipping_status else None,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=page,
        limit=limit,
    )
    return success_response(
        data={"orders": orders, "pagination": pagination_meta(page, limit, total)}
    )


@orders_router.get("/stats")
@require_permission(Resource.ORDERS, Action.READ)
async def order_stats(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = OrderService(db)
    return success_response(data=await svc.get_stats())


@orders_router.get("/number/{order_number}")
@require_permission(Resource.ORDERS, Action.READ)
async def get_order_by_number(
    request: Request,
    order_number: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = OrderService(db)
    return success_response(data=await svc.get_order_by_number(order_number))


@orders_router.get("/{order_id}")
@require_permission(Resource.ORDERS, Action.READ)
async def get_order(
    request: Request,
    order_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = OrderService(db)
    return success_response(data=await svc.get_order(order_id))


@orders_router.put("/{order_id}")
@require_permission(Resource.ORDERS, Action.UPDATE)
async def update_order(
    request: Request,
    order_id: str,
    body: UpdateOrderRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Move an order through its lifecycle (status, payment, shipping)."""
    svc = OrderService(db)
    order = await svc.update_order(
        order_id,
        body.model_dump(exclude_unset=True),
        updated_by=current_user(request).get("sub"),
    )
    return success_response(data=order, message="Order updated")
