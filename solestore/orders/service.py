"""Order service — listing, lookup and status tracking.

Orders are placed by the storefront; the admin side only reads them and
moves them through their status lifecycle.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from solestore.exceptions import NotFoundError, ValidationError
from solestore.utils import Logger, paginate, parse_object_id, serialize_mongo_doc

logger = Logger("orders")


def stamp_status_dates(data: dict, now: datetime) -> dict:
    """Fill shipped_at / delivered_at when a status moves to SHIPPED / DELIVERED
    and the caller did not provide the timestamp."""
    stamped = dict(data)
    statuses = {stamped.get("status"), stamped.get("shipping_status")}
    if "SHIPPED" in statuses and not stamped.get("shipped_at"):
        stamped["shipped_at"] = now
    if "DELIVERED" in statuses and not stamped.get("delivered_at"):
        stamped["delivered_at"] = now
    return stamped


class OrderService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.orders = db["orders"]

    async def list_orders(
        self,
        status_filter: Optional[str] = None,
        payment_status: Optional[str] = None,
        shipping_status: Optional[str] = None,
        user_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        filters: dict = {}
        if status_filter:
            filters["status"] = status_filter
        if payment_status:
            filters["payment_status"] = payment_status
        if shipping_status:
            filters["shipping_status"] = shipping_status
        if user_id:
            filters["user_id"] = user_id
        if date_from or date_to:
            created: dict = {}
            if date_from:
                created["$gte"] = date_from
            if date_to:
                created["$lte"] = date_to
            filters["created_at"] = created
        if search:
            pattern = re.escape(search)
            filters["$or"] = [
                {"order_number": {"$regex": pattern, "$options": "i"}},
                {"tracking_number": {"$regex": pattern, "$options": "i"}},
                {"customer.email": {"$regex": pattern, "$options": "i"}},
            ]

        skip, limit = paginate(page, limit)
        total = await self.orders.count_documents(filters)
        cursor = self.orders.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        orders = [serialize_mongo_doc(doc) async for doc in cursor]
        return orders, total

    async def get_order(self, order_id: str) -> dict:
        oid = parse_object_id(order_id, "order ID")
        order = await self.orders.find_one({"_id": oid})
        if not order:
            raise NotFoundError("Order not found")
        return serialize_mongo_doc(order)

    async def get_order_by_number(self, order_number: str) -> dict:
        order = await self.orders.find_one({"order_number": order_number})
        if not order:
            raise NotFoundError("Order not found")
        return serialize_mongo_doc(order)

    async def update_order(self, order_id: str, update_data: dict, updated_by: str | None = None) -> dict:
        """Update status fields, stamping shipped/delivered dates as needed."""
        oid = parse_object_id(order_id, "order ID")
        clean = {k: v for k, v in update_data.items() if v is not None}
        if not clean:
            raise ValidationError("Nothing to update")

        now = datetime.now(timezone.utc)
        clean = {k: getattr(v, "value", v) for k, v in clean.items()}
        clean = stamp_status_dates(clean, now)
        clean["updated_at"] = now
        clean["updated_by"] = updated_by

        result = await self.orders.find_one_and_update(
            {"_id": oid},
            {"$set": clean},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundError("Order not found")
        logger.info(f"Order {result.get('order_number', order_id)} updated: {sorted(clean)}")
        return serialize_mongo_doc(result)

    async def get_stats(self) -> dict:
        revenue = 0
        async for row in self.orders.aggregate(
            [
                {"$match": {"status": "DELIVERED"}},
                {"$group": {"_id": None, "total": {"$sum": "$total_amount"}}},
            ]
        ):
            revenue = row["total"]

        recent_cursor = self.orders.find({}).sort("created_at", -1).limit(5)
        return {
            "total_orders": await self.orders.count_documents({}),
            "pending_orders": await self.orders.count_documents({"status": "PENDING"}),
            "completed_orders": await self.orders.count_documents({"status": "DELIVERED"}),
            "total_revenue": revenue,
            "recent_orders": [serialize_mongo_doc(doc) async for doc in recent_cursor],
        }
