from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource, Role
from solestore.rbac.decorators import current_role, current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import CreateUserRequest, UpdateUserRequest
from .service import UserService

users_router = APIRouter()


def _actor(request: Request) -> dict:
    """Acting user: token subject plus the role resolved by the middleware."""
    return {"sub": current_user(request).get("sub"), "role": current_role(request)}


@users_router.get("/available-roles")
@require_permission(Resource.USERS, Action.READ)
async def available_roles(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Roles the caller may grant, always strictly below their own."""
    svc = UserService(db)
    return success_response(data={"roles": svc.available_roles(current_role(request))})


@users_router.post("/")
@require_permission(Resource.USERS, Action.CREATE)
async def create_user(
    request: Request,
    body: CreateUserRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.create_user(data=body.model_dump(), actor=_actor(request))
    return success_response(data=user, message="User created", code=201)


@users_router.get("/")
@require_permission(Resource.USERS, Action.READ)
async def list_users(
    request: Request,
    q: Optional[str] = Query(None),
    role: Optional[Role] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    users, total = await svc.list_users(
        query=q, role=role.value if role else None, page=page, limit=limit
    )
    return success_response(
        data={"users": users, "pagination": pagination_meta(page, limit, total)}
    )


@users_router.get("/{user_id}")
@require_permission(Resource.USERS, Action.READ)
async def get_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    return success_response(data=await svc.get_user(user_id))


@users_router.put("/{user_id}")
@require_permission(Resource.USERS, Action.UPDATE)
async def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.update_user(
        user_id, body.model_dump(exclude_unset=True), actor=_actor(request)
    )
    return success_response(data=user, message="User updated")


@users_router.delete("/{user_id}")
@require_permission(Resource.USERS, Action.DELETE)
async def delete_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    result = await svc.delete_user(user_id, actor=_actor(request))
    return success_response(data=result, message="User deleted")
