"""Dashboard figures aggregated across the catalog, orders and customers."""

from datetime import datetime, timedelta, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.utils import serialize_mongo_doc


def growth(current: float, previous: float) -> float:
    """Percentage change, 100 when growing from nothing."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


class AnalyticsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _period(self, start: datetime, end: datetime) -> dict:
        revenue, orders = 0, 0
        async for row in self.db["orders"].aggregate(
            [
                {"$match": {"created_at": {"$gte": start, "$lt": end}, "status": {"$nin": ["CANCELLED", "REFUNDED"]}}},
                {"$group": {"_id": None, "revenue": {"$sum": "$total_amount"}, "orders": {"$sum": 1}}},
            ]
        ):
            revenue, orders = row["revenue"], row["orders"]
        customers = await self.db["customers"].count_documents(
            {"created_at": {"$gte": start, "$lt": end}, "is_deleted": {"$ne": True}}
        )
        return {"revenue": revenue, "orders": orders, "customers": customers}

    async def dashboard(self) -> dict:
        """Totals plus 30-day figures compared with the 30 days before."""
        now = datetime.now(timezone.utc)
        current = await self._period(now - timedelta(days=30), now)
        previous = await self._period(now - timedelta(days=60), now - timedelta(days=30))

        low_stock = await self.db["variants"].count_documents(
            {"is_active": True, "$expr": {"$lte": ["$stock", "$low_stock_threshold"]}}
        )
        return {
            "total_products": await self.db["products"].count_documents({"is_deleted": {"$ne": True}}),
            "total_orders": await self.db["orders"].count_documents({}),
            "total_customers": await self.db["customers"].count_documents({"is_deleted": {"$ne": True}}),
            "low_stock_variants": low_stock,
            "last_30_days": current,
            "growth": {key: growth(current[key], previous[key]) for key in current},
        }

    async def sales(self, days: int = 30) -> list[dict]:
        """Daily revenue and order count of delivered orders."""
        start = datetime.now(timezone.utc) - timedelta(days=days)
        pipeline = [
            {"$match": {"created_at": {"$gte": start}, "status": "DELIVERED"}},
            {
                "$group": {
                    "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$created_at"}},
                    "revenue": {"$sum": "$total_amount"},
                    "orders": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]
        return [
            {"date": row["_id"], "revenue": row["revenue"], "orders": row["orders"]}
            async for row in self.db["orders"].aggregate(pipeline)
        ]

    async def top_products(self, limit: int = 10) -> list[dict]:
        """Best sellers by quantity across order items."""
        pipeline = [
            {"$unwind": "$items"},
            {
                "$group": {
                    "_id": "$items.product_id",
                    "quantity": {"$sum": "$items.quantity"},
                    "revenue": {"$sum": "$items.total_price"},
                }
            },
            {"$sort": {"quantity": -1}},
            {"$limit": limit},
        ]
        return [
            serialize_mongo_doc({"product_id": row["_id"], "quantity": row["quantity"], "revenue": row["revenue"]})
            async for row in self.db["orders"].aggregate(pipeline)
        ]
