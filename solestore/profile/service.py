"""
Profile Service — the signed-in admin's own account.

The token's `sub` is the auth provider's user id, so the account is looked
up by `external_id` (or by `_id` when the token carries a Mongo id).
"""

from datetime import datetime, timezone

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from solestore.exceptions import NotFoundError, SoleStoreError
from solestore.utils import Logger, serialize_mongo_doc

logger = Logger("profile")

PROFILE_FIELDS = {"first_name", "last_name", "image_url"}


class ProfileService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = db["users"]

    @staticmethod
    def _owner_filter(sub: str) -> dict:
        keys: list[dict] = [{"external_id": sub}]
        if ObjectId.is_valid(sub):
            keys.append({"_id": ObjectId(sub)})
        return {"$or": keys, "is_deleted": {"$ne": True}}

    async def get_profile(self, sub: str) -> dict:
        user = await self.users.find_one(self._owner_filter(sub))
        if not user:
            raise NotFoundError("User not found")
        return serialize_mongo_doc(user)

    async def update_profile(self, sub: str, update_data: dict) -> dict:
        """
        Update the caller's own profile.
        Only first_name, last_name and image_url are applied; email, role
        and status stay with the /users endpoints.
        """
        clean = {k: v for k, v in update_data.items() if k in PROFILE_FIELDS and v is not None}
        if not clean:
            raise SoleStoreError("No valid fields to update")

        clean["updated_at"] = datetime.now(timezone.utc)
        result = await self.users.find_one_and_update(
            self._owner_filter(sub),
            {"$set": clean},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFoundError("User not found")
        logger.info(f"User {sub} updated own profile: {sorted(clean)}")
        return serialize_mongo_doc(result)
