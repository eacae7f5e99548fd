from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import (
    AlertRequest,
    CreateMarqueeRequest,
    MarqueeTypeEnum,
    UpdateMarqueeRequest,
)
from .service import MarqueeService

marquee_router = APIRouter()


@marquee_router.post("/")
@require_permission(Resource.MARQUEE, Action.CREATE)
async def create_message(
    request: Request,
    body: CreateMarqueeRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    message = await svc.create_message(body.model_dump(), created_by=current_user(request).get("sub"))
    return success_response(data=message, message="Marquee message created", code=201)


@marquee_router.post("/alerts")
@require_permission(Resource.MARQUEE, Action.CREATE)
async def create_alert(
    request: Request,
    body: AlertRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """System, inventory, order or promotion message with preset priority."""
    svc = MarqueeService(db)
    message = await svc.create_alert(
        body.kind, body.model_dump(exclude={"kind"}), created_by=current_user(request).get("sub")
    )
    return success_response(data=message, message="Alert created", code=201)


@marquee_router.get("/")
@require_permission(Resource.MARQUEE, Action.READ)
async def list_messages(
    request: Request,
    type: Optional[MarqueeTypeEnum] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    messages, total = await svc.list_messages(
        type_filter=type.value if type else None, is_active=is_active, page=page, limit=limit
    )
    return success_response(
        data={"messages": messages, "pagination": pagination_meta(page, limit, total)}
    )


@marquee_router.get("/active")
@require_permission(Resource.MARQUEE, Action.READ)
async def active_messages(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    return success_response(data=await svc.active_messages())


@marquee_router.get("/stats")
@require_permission(Resource.MARQUEE, Action.READ)
async def marquee_stats(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    return success_response(data=await svc.get_stats())


@marquee_router.post("/cleanup")
@require_permission(Resource.MARQUEE, Action.UPDATE)
async def cleanup_messages(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    return success_response(data={"deactivated": await svc.cleanup_expired()})


@marquee_router.get("/{message_id}")
@require_permission(Resource.MARQUEE, Action.READ)
async def get_message(
    request: Request,
    message_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    return success_response(data=await svc.get_message(message_id))


@marquee_router.put("/{message_id}")
@require_permission(Resource.MARQUEE, Action.UPDATE)
async def update_message(
    request: Request,
    message_id: str,
    body: UpdateMarqueeRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    message = await svc.update_message(message_id, body.model_dump(exclude_unset=True))
    return success_response(data=message, message="Marquee message updated")


@marquee_router.delete("/{message_id}")
@require_permission(Resource.MARQUEE, Action.DELETE)
async def delete_message(
    request: Request,
    message_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = MarqueeService(db)
    return success_response(data=await svc.delete_message(message_id), message="Marquee message deleted")
