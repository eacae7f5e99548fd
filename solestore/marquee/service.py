"""Marquee service — scrolling dashboard messages ordered by priority."""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from solestore.exceptions import NotFoundError, ValidationError
from solestore.utils import (
    Logger,
    active_window_filter,
    paginate,
    parse_object_id,
    serialize_mongo_doc,
)

logger = Logger("marquee")

# Priority given to each canned alert
ALERT_PRIORITIES = {
    "system": 3,
    "inventory": 4,
    "order": 2,
    "promotion": 3,
}


def build_alert(kind: str, data: dict) -> dict:
    """Turn an alert request into a marquee message document."""
    kind = getattr(kind, "value", kind)
    if kind == "system":
        if not data.get("message"):
            raise ValidationError("System alerts need a message")
        fields = {"title": "System Alert", "message": data["message"], "type": "SYSTEM"}
    elif kind == "inventory":
        if not data.get("product_name") or data.get("stock") is None:
            raise ValidationError("Inventory alerts need product_name and stock")
        fields = {
            "title": "Low Stock Alert",
            "message": f"{data['product_name']} is running low ({data['stock']} left)",
            "type": "INVENTORY",
        }
    elif kind == "order":
        if not data.get("order_number") or data.get("amount") is None:
            raise ValidationError("Order alerts need order_number and amount")
        fields = {
            "title": "New Order",
            "message": f"Order {data['order_number']} received: ${data['amount']:.2f}",
            "type": "ORDER",
        }
    elif kind == "promotion":
        if not data.get("title") or not data.get("message"):
            raise ValidationError("Promotions need a title and a message")
        fields = {"title": data["title"], "message": data["message"], "type": "PROMOTION"}
    else:
        raise ValidationError(f"Unknown alert kind: {kind}")

    return {
        **fields,
        "priority": ALERT_PRIORITIES[kind],
        "is_active": True,
        "start_date": None,
        "end_date": data.get("end_date"),
    }


class MarqueeService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.messages = db["marquee_messages"]

    async def create_message(self, data: dict, created_by: str | None = None) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            **{k: getattr(v, "value", v) for k, v in data.items()},
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.messages.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created marquee message '{doc['title']}' (priority {doc.get('priority')})")
        return serialize_mongo_doc(doc)

    async def create_alert(self, kind: str, data: dict, created_by: str | None = None) -> dict:
        return await self.create_message(build_alert(kind, data), created_by=created_by)

    async def get_message(self, message_id: str) -> dict:
        oid = parse_object_id(message_id, "message ID")
        message = await self.messages.find_one({"_id": oid})
        if not message:
            raise NotFoundError("Marquee message not found")
        return serialize_mongo_doc(message)

    async def list_messages(
        self,
        type_filter: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        filters: dict = {}
        if type_filter:
            filters["type"] = type_filter
        if is_active is not None:
            filters["is_active"] = is_active

        skip, limit = paginate(page, limit)
        total = await self.messages.count_documents(filters)
        cursor = (
            self.messages.find(filters)
            .sort([("priority", -1), ("created_at", -1)])
            .skip(skip)
            .limit(limit)
        )
        return [serialize_mongo_doc(doc) async for doc in cursor], total

    async def active_messages(self) -> list[dict]:
        filters = active_window_filter(datetime.now(timezone.utc))
        cursor = self.messages.find(filters).sort([("priority", -1), ("created_at", -1)])
        return [serialize_mongo_doc(doc) async for doc in cursor]

    async def update_message(self, message_id: str, update_data: dict) -> dict:
        oid = parse_object_id(message_id, "message ID")
        clean = {k: getattr(v, "value", v) for k, v in update_data.items() if v is not None}
        clean["updated_at"] = datetime.now(timezone.utc)
        result = await self.messages.find_one_and_update(
            {"_id": oid}, {"$set": clean}, return_document=ReturnDocument.AFTER
        )
        if not result:
            raise NotFoundError("Marquee message not found")
        return serialize_mongo_doc(result)

    async def delete_message(self, message_id: str) -> dict:
        oid = parse_object_id(message_id, "message ID")
        result = await self.messages.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Marquee message not found")
        return {"message": "Marquee message deleted successfully"}

    async def cleanup_expired(self) -> int:
        now = datetime.now(timezone.utc)
        result = await self.messages.update_many(
            {"is_active": True, "end_date": {"$lt": now}},
            {"$set": {"is_active": False, "updated_at": now}},
        )
        if result.modified_count:
            logger.info(f"Deactivated {result.modified_count} expired marquee messages")
        return result.modified_count

    async def get_stats(self) -> dict:
        by_type = {}
        async for row in self.messages.aggregate(
            [{"$group": {"_id": "$type", "count": {"$sum": 1}}}]
        ):
            by_type[row["_id"]] = row["count"]
        return {
            "total": await self.messages.count_documents({}),
            "active": await self.messages.count_documents({"is_active": True}),
            "by_type": by_type,
        }
