"""
Variant persistence over the `variants` collection.

The collection carries unique indexes on (product_id, size, color) and on
sku (see solestore.config.database). The services check for duplicates
before writing; the indexes catch concurrent writers, and their violations
are mapped back to DuplicateVariantError / DuplicateSkuError here.
"""

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import BulkWriteError, DuplicateKeyError

from solestore.config import settings
from solestore.exceptions import DuplicateSkuError, DuplicateVariantError
from solestore.utils import Logger

logger = Logger("variants.repository")

DUPLICATE_KEY_CODE = 11000


def _duplicate_error_from(error: dict, fallback: dict | None = None):
    """Map one Mongo duplicate-key error entry to the matching domain error."""
    key_pattern = error.get("keyPattern") or {}
    doc = error.get("op") or fallback or {}
    key_value = error.get("keyValue") or {}
    if "sku" in key_pattern or ("sku" in key_value and len(key_value) == 1):
        return DuplicateSkuError([key_value.get("sku", doc.get("sku"))])
    return DuplicateVariantError(
        [(key_value.get("size", doc.get("size")), key_value.get("color", doc.get("color")))]
    )


class VariantRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.variants = db["variants"]
        self.products = db["products"]

    # ── Reads ────────────────────────────────────────────────────
    async def product_exists(self, product_id: str) -> bool:
        if not ObjectId.is_valid(product_id):
            return False
        product = await self.products.find_one(
            {"_id": ObjectId(product_id), "is_deleted": {"$ne": True}},
            {"_id": 1},
        )
        return product is not None

    async def find_by_product(self, product_id: str) -> list[dict]:
        cursor = self.variants.find({"product_id": product_id}).sort(
            [("size", ASCENDING), ("color", ASCENDING)]
        )
        return [doc async for doc in cursor]

    async def get(self, variant_id: ObjectId) -> Optional[dict]:
        return await self.variants.find_one({"_id": variant_id})

    async def find_by_ids(self, variant_ids: list[ObjectId]) -> list[dict]:
        cursor = self.variants.find({"_id": {"$in": variant_ids}})
        return [doc async for doc in cursor]

    async def find_by_product_and_pairs(
        self, product_id: str, pairs: list[tuple[str, str]]
    ) -> list[dict]:
        if not pairs:
            return []
        cursor = self.variants.find(
            {
                "product_id": product_id,
                "$or": [{"size": size, "color": color} for size, color in pairs],
            }
        )
        return [doc async for doc in cursor]

    async def find_by_skus(
        self, skus: list[str], exclude_id: Optional[ObjectId] = None
    ) -> list[dict]:
        if not skus:
            return []
        filters: dict = {"sku": {"$in": skus}}
        if exclude_id is not None:
            filters["_id"] = {"$ne": exclude_id}
        cursor = self.variants.find(filters)
        return [doc async for doc in cursor]

    async def find_pair(
        self,
        product_id: str,
        size: str,
        color: str,
        exclude_id: Optional[ObjectId] = None,
    ) -> Optional[dict]:
        filters: dict = {"product_id": product_id, "size": size, "color": color}
        if exclude_id is not None:
            filters["_id"] = {"$ne": exclude_id}
        return await self.variants.find_one(filters)

    async def find_low_stock(self, product_id: Optional[str] = None) -> list[dict]:
        filters: dict = {
            "is_active": True,
            "$expr": {"$lte": ["$stock", "$low_stock_threshold"]},
        }
        if product_id:
            filters["product_id"] = product_id
        cursor = self.variants.find(filters).sort("stock", ASCENDING)
        return [doc async for doc in cursor]

    # ── Writes ───────────────────────────────────────────────────
    async def insert_one(self, doc: dict) -> dict:
        try:
            result = await self.variants.insert_one(doc)
        except DuplicateKeyError as exc:
            raise _duplicate_error_from(exc.details or {}, doc) from exc
        doc["_id"] = result.inserted_id
        return doc

    async def insert_many(self, docs: list[dict]) -> list[dict]:
        """
        Insert all docs or none.

        With MONGODB_TRANSACTIONS enabled the insert runs in a transaction.
        Otherwise an ordered insert is used and, on failure, the documents
        written before the failing one are deleted again.
        """
        if not docs:
            return []

        try:
            if settings.mongodb_transactions:
                async with await self.db.client.start_session() as session:
                    async with session.start_transaction():
                        await self.variants.insert_many(docs, ordered=True, session=session)
            else:
                try:
                    await self.variants.insert_many(docs, ordered=True)
                except BulkWriteError as exc:
                    written = exc.details.get("nInserted", 0)
                    inserted_ids = [d["_id"] for d in docs[:written] if "_id" in d]
                    if inserted_ids:
                        await self.variants.delete_many({"_id": {"$in": inserted_ids}})
                        logger.warning(
                            f"Rolled back {len(inserted_ids)} partially inserted variants"
                        )
                    raise
        except BulkWriteError as exc:
            write_errors = exc.details.get("writeErrors", [])
            for error in write_errors:
                if error.get("code") == DUPLICATE_KEY_CODE:
                    raise _duplicate_error_from(error) from exc
            raise
        return docs

    async def update(self, variant_id: ObjectId, fields: dict) -> Optional[dict]:
        fields = {**fields, "updated_at": datetime.now(timezone.utc)}
        try:
            return await self.variants.find_one_and_update(
                {"_id": variant_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise _duplicate_error_from(exc.details or {}, fields) from exc

    async def update_many(self, variant_ids: list[ObjectId], fields: dict) -> list[dict]:
        fields = {**fields, "updated_at": datetime.now(timezone.utc)}
        try:
            await self.variants.update_many({"_id": {"$in": variant_ids}}, {"$set": fields})
        except DuplicateKeyError as exc:
            raise _duplicate_error_from(exc.details or {}, fields) from exc
        return await self.find_by_ids(variant_ids)

    async def delete(self, variant_id: ObjectId) -> bool:
        result = await self.variants.delete_one({"_id": variant_id})
        return result.deleted_count > 0

    async def deactivate_for_product(self, product_id: str) -> int:
        result = await self.variants.update_many(
            {"product_id": product_id},
            {"$set": {"is_active": False, "updated_at": datetime.now(timezone.utc)}},
        )
        return result.modified_count
