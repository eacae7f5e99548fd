"""Product schemas — footwear catalog entries. Sizes and colors live on variants."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from enum import Enum
import re


class ProductStatusEnum(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CreateProductRequest(BaseModel):
    """POST /products — create a new product."""

    name: str = Field(..., min_length=2, max_length=200)
    slug: Optional[str] = Field(None, max_length=200, description="Derived from name when omitted")
    sku: str = Field(..., min_length=1, max_length=40, description="Base SKU; variant SKUs extend it")
    description: Optional[str] = Field(None, max_length=5000)
    short_description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    status: ProductStatusEnum = ProductStatusEnum.DRAFT
    is_featured: bool = False
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list, description="Image URLs")

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if v and not _SLUG_PATTERN.match(v):
            raise ValueError("Slug must be lowercase letters, numbers and hyphens")
        return v

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v):
        if not re.match(r"^[A-Za-z0-9\-_]+$", v):
            raise ValueError("SKU can only contain letters, numbers, hyphens, and underscores")
        return v.upper()


class UpdateProductRequest(BaseModel):
    """PUT /products/{id} — partial update."""

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    sku: Optional[str] = Field(None, min_length=1, max_length=40)
    description: Optional[str] = None
    short_description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    status: Optional[ProductStatusEnum] = None
    is_featured: Optional[bool] = None
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if v and not _SLUG_PATTERN.match(v):
            raise ValueError("Slug must be lowercase letters, numbers and hyphens")
        return v

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v):
        if v and not re.match(r"^[A-Za-z0-9\-_]+$", v):
            raise ValueError("SKU can only contain letters, numbers, hyphens, and underscores")
        return v.upper() if v else v
