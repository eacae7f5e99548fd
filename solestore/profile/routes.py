"""
Profile Routes — the signed-in admin's own account.

No user ID in the URL; the token's `sub` identifies the account.

Endpoints:
    GET    /        Get own profile
    PUT    /        Update own first/last name and image
"""

from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.config import get_database
from solestore.exceptions import AuthorizationDenied
from solestore.rbac.decorators import current_role, current_user
from solestore.utils import success_response
from .schemas import UpdateProfileRequest
from .service import ProfileService

profile_router = APIRouter()


def _get_sub(request: Request) -> str:
    """Caller's id; the token must carry a role this service recognises."""
    if current_role(request) is None:
        raise AuthorizationDenied("Permission denied. Unknown role")
    sub = current_user(request).get("sub")
    if not sub:
        raise AuthorizationDenied("Authentication context not found")
    return sub


@profile_router.get("/")
async def get_my_profile(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProfileService(db)
    return success_response(data=await svc.get_profile(_get_sub(request)))


@profile_router.put("/")
async def update_my_profile(
    request: Request,
    body: UpdateProfileRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Email, role and active flag are not editable here."""
    svc = ProfileService(db)
    profile = await svc.update_profile(_get_sub(request), body.model_dump(exclude_unset=True))
    return success_response(data=profile, message="Profile updated")
