from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import (
    BillboardPositionEnum,
    BillboardTypeEnum,
    CreateBillboardRequest,
    ReorderBillboardsRequest,
    UpdateBillboardRequest,
)
from .service import BillboardService

billboards_router = APIRouter()


@billboards_router.post("/")
@require_permission(Resource.BILLBOARDS, Action.CREATE)
async def create_billboard(
    request: Request,
    body: CreateBillboardRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    billboard = await svc.create_billboard(
        body.model_dump(), created_by=current_user(request).get("sub")
    )
    return success_response(data=billboard, message="Billboard created", code=201)


@billboards_router.get("/")
@require_permission(Resource.BILLBOARDS, Action.READ)
async def list_billboards(
    request: Request,
    type: Optional[BillboardTypeEnum] = Query(None),
    position: Optional[BillboardPositionEnum] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    billboards, total = await svc.list_billboards(
        type_filter=type.value if type else None,
        position=position.value if position else None,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return success_response(
        data={"billboards": billboards, "pagination": pagination_meta(page, limit, total)}
    )


@billboards_router.get("/active")
@require_permission(Resource.BILLBOARDS, Action.READ)
async def active_billboards(
    request: Request,
    position: Optional[BillboardPositionEnum] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    return success_response(data=await svc.active_billboards(position.value if position else None))


@billboards_router.get("/stats")
@require_permission(Resource.BILLBOARDS, Action.READ)
async def billboard_stats(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    return success_response(data=await svc.get_stats())


@billboards_router.put("/reorder")
@require_permission(Resource.BILLBOARDS, Action.UPDATE)
async def reorder_billboards(
    request: Request,
    body: ReorderBillboardsRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    return success_response(data=await svc.reorder(body.billboard_ids), message="Billboards reordered")


@billboards_router.post("/cleanup")
@require_permission(Resource.BILLBOARDS, Action.UPDATE)
async def cleanup_billboards(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Deactivate billboards past their end date."""
    svc = BillboardService(db)
    count = await svc.cleanup_expired()
    return success_response(data={"deactivated": count})


@billboards_router.get("/{billboard_id}")
@require_permission(Resource.BILLBOARDS, Action.READ)
async def get_billboard(
    request: Request,
    billboard_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    return success_response(data=await svc.get_billboard(billboard_id))


@billboards_router.put("/{billboard_id}")
@require_permission(Resource.BILLBOARDS, Action.UPDATE)
async def update_billboard(
    request: Request,
    billboard_id: str,
    body: UpdateBillboardRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    billboard = await svc.update_billboard(billboard_id, body.model_dump(exclude_unset=True))
    return success_response(data=billboard, message="Billboard updated")


@billboards_router.delete("/{billboard_id}")
@require_permission(Resource.BILLBOARDS, Action.DELETE)
async def delete_billboard(
    request: Request,
    billboard_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BillboardService(db)
    return success_response(data=await svc.delete_billboard(billboard_id), message="Billboard deleted")
