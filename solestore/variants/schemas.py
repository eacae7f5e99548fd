"""
Product variant schemas.

A variant is one purchasable size/color (optionally material) combination of
a product. Sizes are strings ("9", "9.5", "EU 42"); numeric sizes sent by the
dashboard are coerced to strings.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
import re


_SKU_PATTERN = re.compile(r"^[A-Za-z0-9\-_]+$")


def _coerce_str(v):
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def _validate_sku(v):
    if v and not _SKU_PATTERN.match(v):
        raise ValueError("SKU can only contain letters, numbers, hyphens, and underscores")
    return v.upper() if v else v


# ── Sub-models ───────────────────────────────────────────────────


class SizeColorCombination(BaseModel):
    size: str = Field(..., min_length=1, max_length=20)
    color: str = Field(..., min_length=1, max_length=50)

    coerce_size_color = field_validator("size", "color", mode="before")(_coerce_str)


# ── Main request schemas ─────────────────────────────────────────


class CreateVariantRequest(BaseModel):
    """POST /products/{id}/variants — create a single variant."""

    size: str = Field(..., min_length=1, max_length=20)
    color: str = Field(..., min_length=1, max_length=50)
    material: Optional[str] = Field(None, max_length=50)
    sku: str = Field(..., min_length=1, max_length=60)
    price: float = Field(..., ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    is_active: bool = True
    is_default: Optional[bool] = None

    coerce_size_color = field_validator("size", "color", mode="before")(_coerce_str)
    normalize_sku = field_validator("sku")(_validate_sku)


class UpdateVariantRequest(BaseModel):
    """PUT /products/{id}/variants/{variant_id} — partial update."""

    size: Optional[str] = Field(None, min_length=1, max_length=20)
    color: Optional[str] = Field(None, min_length=1, max_length=50)
    material: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, min_length=1, max_length=60)
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None

    coerce_size_color = field_validator("size", "color", mode="before")(_coerce_str)
    normalize_sku = field_validator("sku")(_validate_sku)


class VariantMatrixRequest(BaseModel):
    """POST /products/{id}/variants/matrix — bulk create from a size × color grid.

    Emptiness of sizes, colors and the selection is checked by the matrix
    expansion, not here, so the caller gets a domain error.
    """

    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    selected_combinations: List[SizeColorCombination] = Field(default_factory=list)
    base_price: float = Field(..., ge=0)
    base_stock: int = Field(default=0, ge=0)
    base_low_stock_threshold: int = Field(default=5, ge=0)
    base_sku: str = Field(..., min_length=1, max_length=40, description="Used verbatim as the SKU prefix")

    @field_validator("sizes", "colors", mode="before")
    @classmethod
    def coerce_items(cls, v):
        if isinstance(v, list):
            return [_coerce_str(item) for item in v]
        return v


class BulkVariantUpdateRequest(BaseModel):
    """PUT /products/{id}/variants/bulk — same update applied to many variants."""

    variant_ids: List[str] = Field(..., min_length=1)
    updates: UpdateVariantRequest


class StockUpdateRequest(BaseModel):
    """PUT /products/{id}/variants/{variant_id}/stock

    `quantity` sets the stock, `adjustment` adds to it (floored at zero).
    """

    quantity: Optional[int] = Field(None, ge=0)
    adjustment: Optional[int] = None


class DuplicateVariantRequest(BaseModel):
    """POST /products/{id}/variants/{variant_id}/duplicate — fields to override."""

    size: Optional[str] = Field(None, min_length=1, max_length=20)
    color: Optional[str] = Field(None, min_length=1, max_length=50)
    material: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None

    coerce_size_color = field_validator("size", "color", mode="before")(_coerce_str)
    normalize_sku = field_validator("sku")(_validate_sku)
