from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.config import get_database
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import success_response
from .schemas import UpdateStoreSettingsRequest
from .service import StoreSettingsService

settings_router = APIRouter()


@settings_router.get("/")
@require_permission(Resource.SETTINGS, Action.READ)
async def get_settings(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = StoreSettingsService(db)
    return success_response(data=await svc.get_settings())


@settings_router.put("/")
@require_permission(Resource.SETTINGS, Action.UPDATE)
async def update_settings(
    request: Request,
    body: UpdateStoreSettingsRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = StoreSettingsService(db)
    data = await svc.update_settings(
        body.model_dump(exclude_unset=True), updated_by=current_user(request).get("sub")
    )
    return success_response(data=data, message="Settings updated")
