"""
Size × color matrix expansion for product variants.

Pure functions only: SKU generation, turning a matrix selection into the
documents to insert, duplicate detection and stock clamping. Persistence
lives in VariantRepository.

SKU format:  {base_sku}-{SIZE}-{COL}
  - SIZE : size with all whitespace removed, uppercased
  - COL  : color with all whitespace removed, uppercased, first 3 chars
Colors shorter than three characters are used as-is. Different colors that
share their first three letters ("Navy", "Nav") produce the same code; the
scheme is kept as-is because issued SKUs depend on it, and the catalog-wide
SKU check catches the collision.
"""

import re
from dataclasses import asdict, dataclass
from typing import Hashable, Iterable, Optional, TypeVar

from solestore.exceptions import InvalidMatrixRequest
from .schemas import VariantMatrixRequest

_WHITESPACE = re.compile(r"\s+")

COLOR_CODE_LENGTH = 3

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class VariantCreateSpec:
    """A concrete variant about to be inserted."""

    product_id: str
    size: str
    color: str
    sku: str
    price: float
    stock: int
    low_stock_threshold: int
    is_active: bool = True
    material: Optional[str] = None
    compare_price: Optional[float] = None
    cost_price: Optional[float] = None
    weight: Optional[float] = None

    @property
    def pair(self) -> tuple[str, str]:
        return self.size, self.color

    def to_document(self) -> dict:
        return asdict(self)


def generate_sku(base_sku: str, size: str, color: str) -> str:
    size_code = _WHITESPACE.sub("", str(size)).upper()
    color_code = _WHITESPACE.sub("", str(color)).upper()[:COLOR_CODE_LENGTH]
    return f"{base_sku}-{size_code}-{color_code}"


def sku_prefix(sku: str) -> str:
    """Base part of a generated SKU (everything before the first hyphen)."""
    return sku.split("-")[0]


def adjust_stock(current_stock: int, delta: int) -> int:
    """Apply a stock delta, flooring at zero instead of rejecting."""
    return max(0, current_stock + delta)


def find_repeated(values: Iterable[T]) -> list[T]:
    """Values that occur more than once, each listed once in first-seen order."""
    seen: set = set()
    repeated: list = []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return repeated


def find_duplicate_pairs(
    existing: Iterable[tuple[str, str]],
    requested: Iterable[tuple[str, str]],
) -> list[tuple[str, str]]:
    """Requested pairs that already exist, in request order."""
    existing_set = set(existing)
    duplicates: list[tuple[str, str]] = []
    for pair in requested:
        if pair in existing_set and pair not in duplicates:
            duplicates.append(pair)
    return duplicates


def expand_matrix(product_id: str, request: VariantMatrixRequest | dict) -> list[VariantCreateSpec]:
    """
    Build one VariantCreateSpec per selected (size, color) combination.

    Only the explicit selection is expanded, never the full cross product.
    Raises InvalidMatrixRequest before generating any SKU when sizes, colors
    or the selection are empty, or when the selection repeats a pair.
    """
    if isinstance(request, dict):
        request = VariantMatrixRequest.model_validate(request)

    if not request.sizes:
        raise InvalidMatrixRequest("At least one size is required")
    if not request.colors:
        raise InvalidMatrixRequest("At least one color is required")
    if not request.selected_combinations:
        raise InvalidMatrixRequest("At least one size/color combination must be selected")

    pairs = [(c.size, c.color) for c in request.selected_combinations]
    repeated = find_repeated(pairs)
    if repeated:
        listed = ", ".join(f"{size}/{color}" for size, color in repeated)
        raise InvalidMatrixRequest(f"Combinations selected more than once: {listed}")

    return [
        VariantCreateSpec(
            product_id=product_id,
            size=size,
            color=color,
            sku=generate_sku(request.base_sku, size, color),
            price=request.base_price,
            stock=request.base_stock,
            low_stock_threshold=request.base_low_stock_threshold,
            is_active=True,
        )
        for size, color in pairs
    ]
