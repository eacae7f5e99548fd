from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class BillboardTypeEnum(str, Enum):
    PROMOTIONAL = "PROMOTIONAL"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    PRODUCT_LAUNCH = "PRODUCT_LAUNCH"
    SALE = "SALE"
    SEASONAL = "SEASONAL"
    SYSTEM_MESSAGE = "SYSTEM_MESSAGE"
    BRAND_CAMPAIGN = "BRAND_CAMPAIGN"


class BillboardPositionEnum(str, Enum):
    HEADER = "HEADER"
    SIDEBAR = "SIDEBAR"
    FOOTER = "FOOTER"
    MODAL = "MODAL"
    DASHBOARD_TOP = "DASHBOARD_TOP"
    DASHBOARD_BOTTOM = "DASHBOARD_BOTTOM"
    PRODUCT_PAGE = "PRODUCT_PAGE"
    CHECKOUT = "CHECKOUT"


class _Window(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class CreateBillboardRequest(_Window):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = Field(None, max_length=100)
    type: BillboardTypeEnum = BillboardTypeEnum.PROMOTIONAL
    position: BillboardPositionEnum = BillboardPositionEnum.HEADER
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0)


class UpdateBillboardRequest(_Window):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    type: Optional[BillboardTypeEnum] = None
    position: Optional[BillboardPositionEnum] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class ReorderBillboardsRequest(BaseModel):
    """Billboard ids in the order they should be displayed."""

    billboard_ids: List[str] = Field(..., min_length=1)
