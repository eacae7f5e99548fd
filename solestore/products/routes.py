from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import CreateProductRequest, UpdateProductRequest, ProductStatusEnum
from .service import ProductService

products_router = APIRouter()


@products_router.post("/")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def create_product(
    request: Request,
    body: CreateProductRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    product = await svc.create_product(
        data=body.model_dump(),
        created_by=current_user(request).get("sub"),
    )
    return success_response(data=product, message="Product created", code=201)


@products_router.get("/")
@require_permission(Resource.PRODUCTS, Action.READ)
async def list_products(
    request: Request,
    q: Optional[str] = Query(None, description="Search by name, SKU or tag"),
    status: Optional[ProductStatusEnum] = Query(None),
    category: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    products, total = await svc.list_products(
        query=q,
        status_filter=status.value if status else None,
        category=category,
        brand=brand,
        featured=featured,
        page=page,
        limit=limit,
    )
    return success_response(
        data={"products": products, "pagination": pagination_meta(page, limit, total)}
    )


@products_router.get("/stats")
@require_permission(Resource.PRODUCTS, Action.READ)
async def product_stats(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    return success_response(data=await svc.get_stats())


@products_router.get("/slug/{slug}")
@require_permission(Resource.PRODUCTS, Action.READ)
async def get_product_by_slug(
    request: Request,
    slug: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    return success_response(data=await svc.get_product_by_slug(slug))


@products_router.get("/{product_id}")
@require_permission(Resource.PRODUCTS, Action.READ)
async def get_product(
    request: Request,
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    return success_response(data=await svc.get_product(product_id))


@products_router.put("/{product_id}")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def update_product(
    request: Request,
    product_id: str,
    body: UpdateProductRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ProductService(db)
    product = await svc.update_product(product_id, body.model_dump(exclude_unset=True))
    return success_response(data=product, message="Product updated")


@products_router.delete("/{product_id}")
@require_permission(Resource.PRODUCTS, Action.DELETE)
async def delete_product(
    request: Request,
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Soft-delete a product; its variants are deactivated, not removed."""
    svc = ProductService(db)
    result = await svc.delete_product(product_id)
    return success_response(data=result, message="Product deleted")
