"""
Category and brand routes.

Endpoints (both routers):
    GET    /                 List (product_count per entry)
    GET    /{id}             Get one
    POST   /                 Create (slug generated from name)
    PUT    /{id}             Update
    DELETE /{id}             Delete, refused while products are assigned
"""

from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.config import get_database
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import success_response
from .schemas import (
    CreateBrandRequest,
    CreateCategoryRequest,
    UpdateBrandRequest,
    UpdateCategoryRequest,
)
from .service import BrandService, CategoryService

categories_router = APIRouter()
brands_router = APIRouter()


# ── Categories ───────────────────────────────────────────────────
@categories_router.get("/")
@require_permission(Resource.PRODUCTS, Action.READ)
async def list_categories(
    request: Request,
    include_inactive: bool = Query(False),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CategoryService(db)
    return success_response(data=await svc.list_entries(include_inactive=include_inactive))


@categories_router.get("/{category_id}")
@require_permission(Resource.PRODUCTS, Action.READ)
async def get_category(
    request: Request,
    category_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CategoryService(db)
    return success_response(data=await svc.get_entry(category_id))


@categories_router.post("/")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def create_category(
    request: Request,
    body: CreateCategoryRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CategoryService(db)
    category = await svc.create_entry(body.model_dump(), created_by=current_user(request).get("sub"))
    return success_response(data=category, message="Category created", code=201)


@categories_router.put("/{category_id}")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def update_category(
    request: Request,
    category_id: str,
    body: UpdateCategoryRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CategoryService(db)
    category = await svc.update_entry(category_id, body.model_dump(exclude_unset=True))
    return success_response(data=category, message="Category updated")


@categories_router.delete("/{category_id}")
@require_permission(Resource.PRODUCTS, Action.DELETE)
async def delete_category(
    request: Request,
    category_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CategoryService(db)
    result = await svc.delete_entry(category_id)
    return success_response(data=result, message="Category deleted")


# ── Brands ───────────────────────────────────────────────────────
@brands_router.get("/")
@require_permission(Resource.PRODUCTS, Action.READ)
async def list_brands(
    request: Request,
    include_inactive: bool = Query(False),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BrandService(db)
    return success_response(data=await svc.list_entries(include_inactive=include_inactive))


@brands_router.get("/{brand_id}")
@require_permission(Resource.PRODUCTS, Action.READ)
async def get_brand(
    request: Request,
    brand_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BrandService(db)
    return success_response(data=await svc.get_entry(brand_id))


@brands_router.post("/")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def create_brand(
    request: Request,
    body: CreateBrandRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BrandService(db)
    brand = await svc.create_entry(body.model_dump(), created_by=current_user(request).get("sub"))
    return success_response(data=brand, message="Brand created", code=201)


@brands_router.put("/{brand_id}")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def update_brand(
    request: Request,
    brand_id: str,
    body: UpdateBrandRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BrandService(db)
    brand = await svc.update_entry(brand_id, body.model_dump(exclude_unset=True))
    return success_response(data=brand, message="Brand updated")


@brands_router.delete("/{brand_id}")
@require_permission(Resource.PRODUCTS, Action.DELETE)
async def delete_brand(
    request: Request,
    brand_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = BrandService(db)
    result = await svc.delete_entry(brand_id)
    return success_response(data=result, message="Brand deleted")
