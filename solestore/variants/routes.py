"""
Variant routes.

Product-scoped endpoints live under /products/{product_id}/variants and are
guarded by the `products` resource, like the product endpoints themselves.
Catalog-wide helpers (low-stock report, SKU availability check) live under /variants.
"""

from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database
from solestore.exceptions import SoleStoreError
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import require_permission
from solestore.utils import success_response
from .schemas import (
    BulkVariantUpdateRequest,
    CreateVariantRequest,
    DuplicateVariantRequest,
    StockUpdateRequest,
    UpdateVariantRequest,
    VariantMatrixRequest,
)
from .service import VariantService

variants_router = APIRouter()
variant_tools_router = APIRouter()


@variants_router.get("/{product_id}/variants")
@require_permission(Resource.PRODUCTS, Action.READ)
async def list_variants(
    request: Request,
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """All variants of a product, ordered by size then color."""
    svc = VariantService(db)
    variants = await svc.list_variants(product_id)
    return success_response(data=variants)


@variants_router.get("/{product_id}/variants/stats")
@require_permission(Resource.PRODUCTS, Action.READ)
async def variant_stats(
    request: Request,
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    return success_response(data=await svc.stats(product_id))


@variants_router.post("/{product_id}/variants")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def create_variant(
    request: Request,
    product_id: str,
    body: CreateVariantRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create a single variant."""
    svc = VariantService(db)
    variant = await svc.create_variant(product_id, body.model_dump())
    return success_response(data=variant, message="Variant created", code=201)


@variants_router.post("/{product_id}/variants/matrix")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def create_variants_from_matrix(
    request: Request,
    product_id: str,
    body: VariantMatrixRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Bulk-create the selected size × color combinations (all or nothing)."""
    svc = VariantService(db)
    variants = await svc.create_from_matrix(product_id, body)
    return success_response(data=variants, message="Variants created", code=201)


@variants_router.put("/{product_id}/variants/bulk")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def bulk_update_variants(
    request: Request,
    product_id: str,
    body: BulkVariantUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    variants = await svc.bulk_update(
        product_id, body.variant_ids, body.updates.model_dump(exclude_unset=True)
    )
    return success_response(data=variants, message="Variants updated")


@variants_router.get("/{product_id}/variants/{variant_id}")
@require_permission(Resource.PRODUCTS, Action.READ)
async def get_variant(
    request: Request,
    product_id: str,
    variant_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    return success_response(data=await svc.get_variant(product_id, variant_id))


@variants_router.put("/{product_id}/variants/{variant_id}")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def update_variant(
    request: Request,
    product_id: str,
    variant_id: str,
    body: UpdateVariantRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    variant = await svc.update_variant(
        product_id, variant_id, body.model_dump(exclude_unset=True)
    )
    return success_response(data=variant, message="Variant updated")


@variants_router.put("/{product_id}/variants/{variant_id}/stock")
@require_permission(Resource.PRODUCTS, Action.UPDATE)
async def update_variant_stock(
    request: Request,
    product_id: str,
    variant_id: str,
    body: StockUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Set stock with `quantity`, or shift it with `adjustment` (floored at 0)."""
    svc = VariantService(db)
    if body.adjustment is not None:
        variant = await svc.adjust_stock(product_id, variant_id, body.adjustment)
    elif body.quantity is not None:
        variant = await svc.set_stock(product_id, variant_id, body.quantity)
    else:
        raise SoleStoreError("Either quantity or adjustment must be provided")
    return success_response(data=variant, message="Stock updated")


@variants_router.post("/{product_id}/variants/{variant_id}/duplicate")
@require_permission(Resource.PRODUCTS, Action.CREATE)
async def duplicate_variant(
    request: Request,
    product_id: str,
    variant_id: str,
    body: DuplicateVariantRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    variant = await svc.duplicate_variant(
        product_id, variant_id, body.model_dump(exclude_unset=True)
    )
    return success_response(data=variant, message="Variant duplicated", code=201)


@variants_router.delete("/{product_id}/variants/{variant_id}")
@require_permission(Resource.PRODUCTS, Action.DELETE)
async def delete_variant(
    request: Request,
    product_id: str,
    variant_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    result = await svc.delete_variant(product_id, variant_id)
    return success_response(data=result, message="Variant deleted")


# ── Catalog-wide ─────────────────────────────────────────────────


@variant_tools_router.get("/low-stock")
@require_permission(Resource.PRODUCTS, Action.READ)
async def low_stock_variants(
    request: Request,
    product_id: Optional[str] = Query(None, description="Limit to one product"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Active variants whose stock is at or below their threshold."""
    svc = VariantService(db)
    return success_response(data=await svc.low_stock(product_id))


@variant_tools_router.get("/sku-available")
@require_permission(Resource.PRODUCTS, Action.READ)
async def sku_available(
    request: Request,
    sku: str = Query(..., min_length=1),
    exclude_id: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = VariantService(db)
    available = await svc.sku_available(sku.upper(), exclude_id)
    return success_response(data={"sku": sku.upper(), "available": available})
