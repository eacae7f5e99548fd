"""Product service — CRUD on the products collection."""

import re
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from solestore.catalog.service import BrandService, CategoryService
from solestore.exceptions import DuplicateError, NotFoundError, duplicate_key_error
from solestore.utils import Logger, paginate, parse_object_id, serialize_mongo_doc, slugify
from solestore.variants.repository import VariantRepository

logger = Logger("products")


class ProductService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.products = db["products"]

    async def _check_unique(self, slug: str | None, sku: str | None, exclude_id=None) -> None:
        base: dict = {"is_deleted": {"$ne": True}}
        if exclude_id is not None:
            base["_id"] = {"$ne": exclude_id}
        if slug and await self.products.find_one({**base, "slug": slug}):
            raise DuplicateError(f"Product with slug '{slug}' already exists")
        if sku and await self.products.find_one({**base, "sku": sku}):
            raise DuplicateError(f"Product with SKU '{sku}' already exists")

    async def _check_references(self, data: dict) -> None:
        """category and brand hold ids of existing categories/brands documents."""
        for service_cls in (CategoryService, BrandService):
            entry_id = data.get(service_cls.product_field)
            if entry_id and not await service_cls(self.db).exists(entry_id):
                raise NotFoundError(f"{service_cls.label} not found")

    async def create_product(self, data: dict, created_by: str | None = None) -> dict:
        """Create a product. Slug defaults to the slugified name; slug and SKU must be unique."""
        data["slug"] = data.get("slug") or slugify(data["name"])
        await self._check_unique(data["slug"], data.get("sku"))
        await self._check_references(data)

        now = datetime.now(timezone.utc)
        doc = {
            **data,
            "is_deleted": False,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.products.insert_one(doc)
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, "Product") from exc
        doc["_id"] = result.inserted_id
        logger.info(f"Created product {doc['sku']} ({doc['slug']})")
        return serialize_mongo_doc(doc)

    async def get_product(self, product_id: str) -> dict:
        oid = parse_object_id(product_id, "product ID")
        product = await self.products.find_one({"_id": oid, "is_deleted": {"$ne": True}})
        if not product:
            raise NotFoundError("Product not found")
        return serialize_mongo_doc(product)

    async def get_product_by_slug(self, slug: str) -> dict:
        product = await self.products.find_one({"slug": slug, "is_deleted": {"$ne": True}})
        if not product:
            raise NotFoundError("Product not found")
        return serialize_mongo_doc(product)

    async def list_products(
        self,
        query: Optional[str] = None,
        status_filter: Optional[str] = None,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        """List products with search (name, SKU, tags) and status/category/brand filters."""
        filters: dict = {"is_deleted": {"$ne": True}}
        if query:
            pattern = re.escape(query)
            filters["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"sku": {"$regex": pattern, "$options": "i"}},
                {"tags": {"$regex": pattern, "$options": "i"}},
            ]
        if status_filter:
            filters["status"] = status_filter
        if category:
            filters["category"] = category
        if brand:
            filters["brand"] = brand
        if featured is not None:
            filters["is_featured"] = featured

        skip, limit = paginate(page, limit)
        total = await self.products.count_documents(filters)
        cursor = self.products.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        products = [serialize_mongo_doc(doc) async for doc in cursor]
        return products, total

    async def update_product(self, product_id: str, update_data: dict) -> dict:
        oid = parse_object_id(product_id, "product ID")
        clean = {k: v for k, v in update_data.items() if v is not None}
        await self._check_unique(clean.get("slug"), clean.get("sku"), exclude_id=oid)
        await self._check_references(clean)
        clean["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self.products.find_one_and_update(
                {"_id": oid, "is_deleted": {"$ne": True}},
                {"$set": clean},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, "Product") from exc
        if not result:
            raise NotFoundError("Product not found")
        return serialize_mongo_doc(result)

    async def delete_product(self, product_id: str) -> dict:
        """Soft-delete a product and deactivate its variants (they are kept)."""
        oid = parse_object_id(product_id, "product ID")
        now = datetime.now(timezone.utc)
        result = await self.products.update_one(
            {"_id": oid, "is_deleted": {"$ne": True}},
            {"$set": {"is_deleted": True, "is_active": False, "deleted_at": now}},
        )
        if result.modified_count == 0:
            raise NotFoundError("Product not found or already deleted")
        await VariantRepository(self.db).deactivate_for_product(product_id)
        logger.info(f"Deleted product {product_id}")
        return {"message": "Product deleted successfully"}

    async def get_stats(self) -> dict:
        live = {"is_deleted": {"$ne": True}}
        by_status = {}
        async for row in self.products.aggregate(
            [{"$match": live}, {"$group": {"_id": "$status", "count": {"$sum": 1}}}]
        ):
            by_status[row["_id"]] = row["count"]
        return {
            "total_products": sum(by_status.values()),
            "by_status": by_status,
            "featured_products": await self.products.count_documents({**live, "is_featured": True}),
        }
