from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime
from enum import Enum


class MarqueeTypeEnum(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    ALERT = "ALERT"
    PROMOTION = "PROMOTION"
    SYSTEM = "SYSTEM"
    INVENTORY = "INVENTORY"
    ORDER = "ORDER"


class CreateMarqueeRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    type: MarqueeTypeEnum = MarqueeTypeEnum.INFO
    priority: int = Field(default=1, ge=1, le=5, description="Higher shows first")
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class UpdateMarqueeRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, min_length=1, max_length=1000)
    type: Optional[MarqueeTypeEnum] = None
    priority: Optional[int] = Field(None, ge=1, le=5)
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AlertKindEnum(str, Enum):
    SYSTEM = "system"
    INVENTORY = "inventory"
    ORDER = "order"
    PROMOTION = "promotion"


class AlertRequest(BaseModel):
    """POST /marquee/alerts — canned message built from a few fields."""

    kind: AlertKindEnum
    message: Optional[str] = None
    title: Optional[str] = None
    product_name: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    order_number: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    end_date: Optional[datetime] = None
