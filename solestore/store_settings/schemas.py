from pydantic import BaseModel, Field, EmailStr
from typing import Optional


class StoreSettingsModel(BaseModel):
    store_name: str = "SoleStore"
    currency: str = Field(default="USD", min_length=3, max_length=3)
    default_low_stock_threshold: int = Field(default=5, ge=0)
    contact_email: Optional[EmailStr] = None


class UpdateStoreSettingsRequest(BaseModel):
    store_name: Optional[str] = Field(None, min_length=1, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    default_low_stock_threshold: Optional[int] = Field(None, ge=0)
    contact_email: Optional[EmailStr] = None
