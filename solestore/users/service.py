"""User service — admin accounts, guarded by the role hierarchy.

Every mutation of another account requires can_manage_user(actor, target),
and a role can only be granted when it is among get_available_roles(actor).
"""

import re
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from solestore.exceptions import (
    AuthorizationDenied,
    DuplicateError,
    NotFoundError,
    duplicate_key_error,
)
from solestore.rbac import (
    Role,
    can_manage_user,
    get_available_roles,
    parse_role,
    role_level,
)
from solestore.utils import Logger, paginate, parse_object_id, serialize_mongo_doc

logger = Logger("users")


def _role_value(role) -> str | None:
    parsed = parse_role(role)
    return parsed.value if parsed else None


def sorted_roles(roles: set[Role]) -> list[str]:
    """Role values ordered from lowest to highest level."""
    return [r.value for r in sorted(roles, key=role_level)]


class UserService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = db["users"]

    @staticmethod
    def _is_self(user: dict, actor: dict) -> bool:
        sub = actor.get("sub")
        return sub is not None and sub in (str(user["_id"]), user.get("external_id"))

    @staticmethod
    def _ensure_grantable(actor_role, role) -> None:
        if parse_role(role) not in get_available_roles(actor_role):
            raise AuthorizationDenied(f"You cannot assign the role {_role_value(role) or role}")

    async def _load(self, user_id: str) -> dict:
        oid = parse_object_id(user_id, "user ID")
        user = await self.users.find_one({"_id": oid, "is_deleted": {"$ne": True}})
        if not user:
            raise NotFoundError("User not found")
        return user

    def available_roles(self, actor_role) -> list[str]:
        return sorted_roles(get_available_roles(actor_role))

    async def create_user(self, data: dict, actor: dict) -> dict:
        """Create a user. The role must be one the actor may grant."""
        actor_role = actor.get("role")
        self._ensure_grantable(actor_role, data.get("role", Role.STAFF))

        existing = await self.users.find_one(
            {
                "$or": [{"email": data["email"]}, {"external_id": data["external_id"]}],
                "is_deleted": {"$ne": True},
            }
        )
        if existing:
            raise DuplicateError("User with this email or external id already exists")

        now = datetime.now(timezone.utc)
        doc = {
            **data,
            "role": _role_value(data.get("role", Role.STAFF)),
            "is_deleted": False,
            "created_by": actor.get("sub"),
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.users.insert_one(doc)
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, "User") from exc
        doc["_id"] = result.inserted_id
        logger.info(f"User {doc['email']} created with role {doc['role']} by {actor.get('sub')}")
        return serialize_mongo_doc(doc)

    async def get_user(self, user_id: str) -> dict:
        return serialize_mongo_doc(await self._load(user_id))

    async def list_users(
        self,
        query: Optional[str] = None,
        role: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[dict], int]:
        """List users with optional search by name or email, and a role filter."""
        filters: dict = {"is_deleted": {"$ne": True}}
        if query:
            pattern = re.escape(query)
            filters["$or"] = [
                {"first_name": {"$regex": pattern, "$options": "i"}},
                {"last_name": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
            ]
        if role:
            filters["role"] = role

        skip, limit = paginate(page, limit)
        total = await self.users.count_documents(filters)
        cursor = self.users.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        users = [serialize_mongo_doc(u) async for u in cursor]
        return users, total

    async def update_user(self, user_id: str, update_data: dict, actor: dict) -> dict:
        """
        Update another user's account.

        The actor must outrank the target (super admins manage everyone),
        may not change their own role, and may only grant roles below
        their own.
        """
        target = await self._load(user_id)
        actor_role = actor.get("role")
        is_self = self._is_self(target, actor)
        clean = {k: v for k, v in update_data.items() if v is not None}

        if not is_self and not can_manage_user(actor_role, target.get("role")):
            logger.warning(
                f"{actor.get('sub')} ({_role_value(actor_role)}) may not manage "
                f"user {user_id} ({target.get('role')})"
            )
            raise AuthorizationDenied("You cannot manage a user with an equal or higher role")

        if "role" in clean:
            new_role = _role_value(clean["role"])
            if new_role != target.get("role"):
                if is_self:
                    raise AuthorizationDenied("You cannot change your own role")
                self._ensure_grantable(actor_role, new_role)
            clean["role"] = new_role

        if "email" in clean:
            clash = await self.users.find_one(
                {"email": clean["email"], "_id": {"$ne": target["_id"]}, "is_deleted": {"$ne": True}}
            )
            if clash:
                raise DuplicateError("User with this email already exists")

        clean["updated_at"] = datetime.now(timezone.utc)
        try:
            result = await self.users.find_one_and_update(
                {"_id": target["_id"], "is_deleted": {"$ne": True}},
                {"$set": clean},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise duplicate_key_error(exc, "User") from exc
        if not result:
            raise NotFoundError("User not found")
        logger.info(f"User {user_id} updated by {actor.get('sub')}: {sorted(clean)}")
        return serialize_mongo_doc(result)

    async def delete_user(self, user_id: str, actor: dict) -> dict:
        """Soft-delete a user the actor outranks. Users cannot delete themselves."""
        target = await self._load(user_id)
        if self._is_self(target, actor):
            raise AuthorizationDenied("You cannot delete your own account")
        if not can_manage_user(actor.get("role"), target.get("role")):
            raise AuthorizationDenied("You cannot manage a user with an equal or higher role")

        await self.users.update_one(
            {"_id": target["_id"]},
            {"$set": {"is_deleted": True, "is_active": False, "deleted_at": datetime.now(timezone.utc)}},
        )
        logger.info(f"User {user_id} deleted by {actor.get('sub')}")
        return {"message": "User deleted successfully"}
