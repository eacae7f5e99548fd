"""Store-wide settings kept in a single document."""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.utils import Logger
from .schemas import StoreSettingsModel

logger = Logger("settings")

SETTINGS_ID = "store"


class StoreSettingsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.settings = db["store_settings"]

    async def get_settings(self) -> dict:
        """Stored settings merged over the defaults."""
        doc = await self.settings.find_one({"_id": SETTINGS_ID}) or {}
        doc.pop("_id", None)
        updated_at = doc.pop("updated_at", None)
        data = StoreSettingsModel(**doc).model_dump()
        if isinstance(updated_at, datetime):
            data["updated_at"] = updated_at.isoformat()
        return data

    async def update_settings(self, update_data: dict, updated_by: str | None = None) -> dict:
        clean = {k: v for k, v in update_data.items() if v is not None}
        if "currency" in clean:
            clean["currency"] = clean["currency"].upper()
        clean["updated_at"] = datetime.now(timezone.utc)
        clean["updated_by"] = updated_by
        await self.settings.update_one({"_id": SETTINGS_ID}, {"$set": clean}, upsert=True)
        logger.info(f"Store settings updated by {updated_by}: {sorted(clean)}")
        return await self.get_settings()
