"""Billboard service — scheduled banners shown on the storefront."""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from solestore.exceptions import NotFoundError
from solestore.utils import (
    Logger,
    active_window_filter,
    paginate,
    parse_object_id,
    serialize_mongo_doc,
)

logger = Logger("billboards")


def _plain(data: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in data.items()}


class BillboardService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.billboards = db["billboards"]

    async def create_billboard(self, data: dict, created_by: str | None = None) -> dict:
        now = datetime.now(timezone.utc)
        doc = {**_plain(data), "created_by": created_by, "created_at": now, "updated_at": now}
        result = await self.billboards.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created billboard '{doc['title']}'")
        return serialize_mongo_doc(doc)

    async def get_billboard(self, billboard_id: str) -> dict:
        oid = parse_object_id(billboard_id, "billboard ID")
        billboard = await self.billboards.find_one({"_id": oid})
        if not billboard:
            raise NotFoundError("Billboard not found")
        return serialize_mongo_doc(billboard)

    async def list_billboards(
        self,
        type_filter: Optional[str] = None,
        position: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        filters: dict = {}
        if type_filter:
            filters["type"] = type_filter
        if position:
            filters["position"] = position
        if is_active is not None:
            filters["is_active"] = is_active

        skip, limit = paginate(page, limit)
        total = await self.billboards.count_documents(filters)
        cursor = (
            self.billboards.find(filters)
            .sort([("sort_order", 1), ("created_at", -1)])
            .skip(skip)
            .limit(limit)
        )
        return [serialize_mongo_doc(doc) async for doc in cursor], total

    async def active_billboards(self, position: Optional[str] = None) -> list[dict]:
        """Billboards that are active and currently inside their display window."""
        filters = active_window_filter(datetime.now(timezone.utc))
        if position:
            filters["position"] = position
        cursor = self.billboards.find(filters).sort([("sort_order", 1), ("created_at", -1)])
        return [serialize_mongo_doc(doc) async for doc in cursor]

    async def update_billboard(self, billboard_id: str, update_data: dict) -> dict:
        oid = parse_object_id(billboard_id, "billboard ID")
        clean = _plain({k: v for k, v in update_data.items() if v is not None})
        clean["updated_at"] = datetime.now(timezone.utc)
        result = await self.billboards.find_one_and_update(
            {"_id": oid}, {"$set": clean}, return_document=ReturnDocument.AFTER
        )
        if not result:
            raise NotFoundError("Billboard not found")
        return serialize_mongo_doc(result)

    async def delete_billboard(self, billboard_id: str) -> dict:
        oid = parse_object_id(billboard_id, "billboard ID")
        result = await self.billboards.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Billboard not found")
        logger.info(f"Deleted billboard {billboard_id}")
        return {"message": "Billboard deleted successfully"}

    async def reorder(self, billboard_ids: list[str]) -> dict:
        """Set sort_order to each id's position in the given list."""
        oids = [parse_object_id(bid, "billboard ID") for bid in billboard_ids]
        now = datetime.now(timezone.utc)
        for index, oid in enumerate(oids):
            await self.billboards.update_one(
                {"_id": oid}, {"$set": {"sort_order": index, "updated_at": now}}
            )
        return {"reordered": len(oids)}

    async def cleanup_expired(self) -> int:
        """Deactivate billboards whose end date has passed."""
        now = datetime.now(timezone.utc)
        result = await self.billboards.update_many(
            {"is_active": True, "end_date": {"$lt": now}},
            {"$set": {"is_active": False, "updated_at": now}},
        )
        if result.modified_count:
            logger.info(f"Deactivated {result.modified_count} expired billboards")
        return result.modified_count

    async def get_stats(self) -> dict:
        by_type = {}
        async for row in self.billboards.aggregate(
            [{"$group": {"_id": "$type", "count": {"$sum": 1}}}]
        ):
            by_type[row["_id"]] = row["count"]
        return {
            "total": await self.billboards.count_documents({}),
            "active": await self.billboards.count_documents({"is_active": True}),
            "scheduled": await self.billboards.count_documents(
                {"is_active": True, "start_date": {"$gt": datetime.now(timezone.utc)}}
            ),
            "by_type": by_type,
        }
