"""
Category and brand services.

Both are small lookup collections that products point at by id
(`product.category`, `product.brand`). They share one implementation and
differ only in collection, label and list order.
"""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from solestore.exceptions import DuplicateError, NotFoundError, SoleStoreError, duplicate_key_error
from solestore.utils import Logger, parse_object_id, serialize_mongo_doc, slugify

logger = Logger("catalog")


class TaxonomyService:
    collection_name: str
    label: str
    product_field: str
    sort: list[tuple[str, int]]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.entries = db[self.collection_name]
        self.products = db["products"]

    async def _load(self, entry_id: str) -> dict:
        oid = parse_object_id(entry_id, f"{self.label.lower()} ID")
        entry = await self.entries.find_one({"_id": oid})
        if not entry:
            raise NotFoundError(f"{self.label} not found")
        return entry

    async def _ensure_slug_free(self, slug: str, exclude_id=None) -> None:
        filters: dict = {"slug": slug}
        if exclude_id is not None:
            filters["_id"] = {"$ne": exclude_id}
        if await self.entries.find_one(filters):
            raise DuplicateError(f"{self.label} with slug '{slug}' already exists")

    async def _product_counts(self, entry_ids: list[str]) -> dict[str, int]:
        """Live products per entry id."""
        counts: dict[str, int] = {}
        pipeline = [
            {"$match": {"is_deleted": {"$ne": True}, self.product_field: {"$in": entry_ids}}},
            {"$group": {"_id": f"${self.product_field}", "count": {"$sum": 1}}},
        ]
        async for row in self.products.aggregate(pipeline):
            counts[row["_id"]] = row["count"]
        return counts

    async def _with_count(self, entry: dict) -> dict:
        data = serialize_mongo_doc(entry)
        counts = await self._product_counts([data["_id"]])
        data["product_count"] = counts.get(data["_id"], 0)
        return data

    async def exists(self, entry_id: str) -> bool:
        oid = parse_object_id(entry_id, f"{self.label.lower()} ID")
        return await self.entries.find_one({"_id": oid}, {"_id": 1}) is not None

    async def create_entry(self, data: dict, created_by: str | None = None) -> dict:
        slug = slugify(data["name"], fallback=self.product_field)
        await self._ensure_slug_free(slug)

        now = datetime.now(timezone.utc)
        doc = {**data, "slug": slug, "created_by": created_by, "created_at": now, "updated_at": now}
        try:
            result = await self.entries.insert_one(doc)
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, self.label) from exc
        doc["_id"] = result.inserted_id
        logger.info(f"Created {self.product_field} '{doc['name']}' ({slug})")
        return {**serialize_mongo_doc(doc), "product_count": 0}

    async def get_entry(self, entry_id: str) -> dict:
        return await self._with_count(await self._load(entry_id))

    async def list_entries(self, include_inactive: bool = False) -> list[dict]:
        filters = {} if include_inactive else {"is_active": True}
        cursor = self.entries.find(filters).sort(self.sort)
        entries = [serialize_mongo_doc(doc) async for doc in cursor]
        counts = await self._product_counts([e["_id"] for e in entries])
        for entry in entries:
            entry["product_count"] = counts.get(entry["_id"], 0)
        return entries

    async def update_entry(self, entry_id: str, update_data: dict) -> dict:
        """Partial update; renaming regenerates the slug."""
        entry = await self._load(entry_id)
        clean = {k: v for k, v in update_data.items() if v is not None}
        if "name" in clean:
            clean["slug"] = slugify(clean["name"], fallback=self.product_field)
            await self._ensure_slug_free(clean["slug"], exclude_id=entry["_id"])
        clean["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self.entries.find_one_and_update(
                {"_id": entry["_id"]},
                {"$set": clean},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, self.label) from exc
        if not result:
            raise NotFoundError(f"{self.label} not found")
        return await self._with_count(result)

    async def delete_entry(self, entry_id: str) -> dict:
        """Delete an entry no live product refers to."""
        entry = await self._load(entry_id)
        in_use = await self.products.count_documents(
            {self.product_field: str(entry["_id"]), "is_deleted": {"$ne": True}}
        )
        if in_use:
            logger.warning(f"Refused to delete {self.product_field} {entry_id}: {in_use} products assigned")
            raise SoleStoreError(
                f"Cannot delete {self.product_field}. It has {in_use} products assigned to it."
            )

        await self.entries.delete_one({"_id": entry["_id"]})
        logger.info(f"Deleted {self.product_field} {entry_id}")
        return {"message": f"{self.label} deleted successfully"}


class CategoryService(TaxonomyService):
    collection_name = "categories"
    label = "Category"
    product_field = "category"
    sort = [("sort_order", 1), ("name", 1)]


class BrandService(TaxonomyService):
    collection_name = "brands"
    label = "Brand"
    product_field = "brand"
    sort = [("name", 1)]
