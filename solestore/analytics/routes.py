from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.config import get_database
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import require_permission
from solestore.utils import success_response
from .service import AnalyticsService

analytics_router = APIRouter()


@analytics_router.get("/dashboard")
@require_permission(Resource.ANALYTICS, Action.READ)
async def dashboard(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = AnalyticsService(db)
    return success_response(data=await svc.dashboard())


@analytics_router.get("/sales")
@require_permission(Resource.ANALYTICS, Action.READ)
async def sales(
    request: Request,
    days: int = Query(30, ge=1, le=365),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = AnalyticsService(db)
    return success_response(data=await svc.sales(days))


@analytics_router.get("/top-products")
@require_permission(Resource.ANALYTICS, Action.READ)
async def top_products(
    request: Request,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = AnalyticsService(db)
    return success_response(data=await svc.top_products(limit))
