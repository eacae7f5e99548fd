"""Customer service — customers and their shipping/billing addresses."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from solestore.exceptions import DuplicateError, NotFoundError
from solestore.utils import Logger, paginate, parse_object_id, serialize_mongo_doc

logger = Logger("customers")


class CustomerService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.customers = db["customers"]
        self.addresses = db["addresses"]

    async def _load(self, customer_id: str) -> dict:
        oid = parse_object_id(customer_id, "customer ID")
        customer = await self.customers.find_one({"_id": oid, "is_deleted": {"$ne": True}})
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    async def create_customer(self, data: dict, created_by: str | None = None) -> dict:
        existing = await self.customers.find_one(
            {"email": data["email"], "is_deleted": {"$ne": True}}
        )
        if existing:
            raise DuplicateError("Customer with this email already exists")

        now = datetime.now(timezone.utc)
        doc = {
            **data,
            "is_deleted": False,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.customers.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created customer {doc['email']}")
        return serialize_mongo_doc(doc)

    async def get_customer(self, customer_id: str) -> dict:
        """Customer with addresses and order count."""
        customer = await self._load(customer_id)
        data = serialize_mongo_doc(customer)
        data["addresses"] = await self.list_addresses(customer_id)
        data["order_count"] = await self.db["orders"].count_documents({"user_id": customer_id})
        return data

    async def list_customers(
        self,
        query: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        filters: dict = {"is_deleted": {"$ne": True}}
        if query:
            pattern = re.escape(query)
            filters["$or"] = [
                {"first_name": {"$regex": pattern, "$options": "i"}},
                {"last_name": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
                {"phone": {"$regex": pattern, "$options": "i"}},
            ]
        skip, limit = paginate(page, limit)
        total = await self.customers.count_documents(filters)
        cursor = self.customers.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        return [serialize_mongo_doc(doc) async for doc in cursor], total

    async def update_customer(self, customer_id: str, update_data: dict) -> dict:
        customer = await self._load(customer_id)
        clean = {k: v for k, v in update_data.items() if v is not None}
        if "email" in clean:
            clash = await self.customers.find_one(
                {"email": clean["email"], "_id": {"$ne": customer["_id"]}, "is_deleted": {"$ne": True}}
            )
            if clash:
                raise DuplicateError("Customer with this email already exists")
        clean["updated_at"] = datetime.now(timezone.utc)
        result = await self.customers.find_one_and_update(
            {"_id": customer["_id"]},
            {"$set": clean},
            return_document=ReturnDocument.AFTER,
        )
        return serialize_mongo_doc(result)

    async def delete_customer(self, customer_id: str) -> dict:
        """Soft-delete a customer (order history keeps referring to it)."""
        customer = await self._load(customer_id)
        await self.customers.update_one(
            {"_id": customer["_id"]},
            {"$set": {"is_deleted": True, "deleted_at": datetime.now(timezone.utc)}},
        )
        logger.info(f"Deleted customer {customer_id}")
        return {"message": "Customer deleted successfully"}

    # ── Addresses ────────────────────────────────────────────────
    async def _clear_default(self, customer_id: str, address_type: str, keep=None) -> None:
        filters: dict = {"customer_id": customer_id, "type": address_type, "is_default": True}
        if keep is not None:
            filters["_id"] = {"$ne": keep}
        await self.addresses.update_many(filters, {"$set": {"is_default": False}})

    async def list_addresses(self, customer_id: str, address_type: Optional[str] = None) -> list[dict]:
        filters: dict = {"customer_id": customer_id}
        if address_type:
            filters["type"] = address_type
        cursor = self.addresses.find(filters).sort([("is_default", -1), ("created_at", -1)])
        return [serialize_mongo_doc(doc) async for doc in cursor]

    async def create_address(self, customer_id: str, data: dict) -> dict:
        """Add an address; a new default replaces the previous default of its type."""
        await self._load(customer_id)
        data = {k: getattr(v, "value", v) for k, v in data.items()}
        if data.get("is_default"):
            await self._clear_default(customer_id, data["type"])

        now = datetime.now(timezone.utc)
        doc = {**data, "customer_id": customer_id, "created_at": now, "updated_at": now}
        result = await self.addresses.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_mongo_doc(doc)

    async def update_address(self, customer_id: str, address_id: str, update_data: dict) -> dict:
        oid = parse_object_id(address_id, "address ID")
        address = await self.addresses.find_one({"_id": oid, "customer_id": customer_id})
        if not address:
            raise NotFoundError("Address not found")

        clean = {k: getattr(v, "value", v) for k, v in update_data.items() if v is not None}
        if clean.get("is_default"):
            await self._clear_default(customer_id, clean.get("type", address["type"]), keep=oid)
        clean["updated_at"] = datetime.now(timezone.utc)
        result = await self.addresses.find_one_and_update(
            {"_id": oid},
            {"$set": clean},
            return_document=ReturnDocument.AFTER,
        )
        return serialize_mongo_doc(result)

    async def delete_address(self, customer_id: str, address_id: str) -> dict:
        oid = parse_object_id(address_id, "address ID")
        result = await self.addresses.delete_one({"_id": oid, "customer_id": customer_id})
        if result.deleted_count == 0:
            raise NotFoundError("Address not found")
        return {"message": "Address deleted successfully"}

    async def get_stats(self) -> dict:
        live = {"is_deleted": {"$ne": True}}
        month_ago = datetime.now(timezone.utc) - timedelta(days=30)
        return {
            "total_customers": await self.customers.count_documents(live),
            "active_customers": await self.customers.count_documents({**live, "is_active": True}),
            "new_customers_30d": await self.customers.count_documents(
                {**live, "created_at": {"$gte": month_ago}}
            ),
        }
