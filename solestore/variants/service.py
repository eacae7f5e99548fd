"""Variant service — single and matrix creation, updates, stock, stats."""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from solestore.exceptions import (
    DuplicateSkuError,
    DuplicateVariantError,
    NotFoundError,
    ValidationError,
)
from solestore.utils import Logger, parse_object_id, serialize_mongo_doc
from .matrix import (
    adjust_stock,
    expand_matrix,
    find_duplicate_pairs,
    find_repeated,
    generate_sku,
    sku_prefix,
)
from .repository import VariantRepository
from .schemas import VariantMatrixRequest

logger = Logger("variants")

# Fields that must stay unique per variant; a bulk update cannot touch them.
_IDENTITY_FIELDS = ("size", "color", "sku")


class VariantService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase | None,
        repository: VariantRepository | None = None,
    ):
        self.db = db
        self.repo = repository or VariantRepository(db)

    async def _require_product(self, product_id: str) -> None:
        if not await self.repo.product_exists(product_id):
            raise NotFoundError("Product not found")

    async def _require_variant(self, product_id: str, variant_id: str) -> dict:
        oid = parse_object_id(variant_id, "variant ID")
        variant = await self.repo.get(oid)
        if not variant or variant.get("product_id") != product_id:
            raise NotFoundError("Variant not found")
        return variant

    async def _ensure_sku_free(self, skus: list[str], exclude_id=None) -> None:
        taken = await self.repo.find_by_skus(skus, exclude_id=exclude_id)
        if taken:
            in_use = {doc["sku"] for doc in taken}
            logger.warning(f"SKU conflict: {sorted(in_use)}")
            raise DuplicateSkuError([sku for sku in skus if sku in in_use])

    # ── Reads ────────────────────────────────────────────────────
    async def list_variants(self, product_id: str) -> list[dict]:
        """All variants of a product ordered by size, then color."""
        await self._require_product(product_id)
        return serialize_mongo_doc(await self.repo.find_by_product(product_id)) or []

    async def get_variant(self, product_id: str, variant_id: str) -> dict:
        return serialize_mongo_doc(await self._require_variant(product_id, variant_id))

    async def sku_available(self, sku: str, exclude_id: Optional[str] = None) -> bool:
        exclude = parse_object_id(exclude_id, "variant ID") if exclude_id else None
        return not await self.repo.find_by_skus([sku], exclude_id=exclude)

    async def low_stock(self, product_id: Optional[str] = None) -> list[dict]:
        """Active variants at or below their low-stock threshold."""
        return serialize_mongo_doc(await self.repo.find_low_stock(product_id)) or []

    async def stats(self, product_id: str) -> dict:
        variants = await self.repo.find_by_product(product_id)
        count = len(variants)
        return {
            "total_variants": count,
            "active_variants": sum(1 for v in variants if v.get("is_active")),
            "total_stock": sum(v.get("stock", 0) for v in variants),
            "total_value": sum(v.get("stock", 0) * float(v.get("price", 0)) for v in variants),
            "low_stock_count": sum(
                1 for v in variants if v.get("stock", 0) <= v.get("low_stock_threshold", 0)
            ),
            "out_of_stock_count": sum(1 for v in variants if v.get("stock", 0) == 0),
            "average_price": (
                sum(float(v.get("price", 0)) for v in variants) / count if count else 0
            ),
        }

    # ── Creation ─────────────────────────────────────────────────
    async def create_variant(self, product_id: str, data: dict) -> dict:
        """Create one variant. Rejects an existing size/color pair or a used SKU."""
        await self._require_product(product_id)

        existing = await self.repo.find_pair(product_id, data["size"], data["color"])
        if existing:
            raise DuplicateVariantError([(data["size"], data["color"])])
        await self._ensure_sku_free([data["sku"]])

        now = datetime.now(timezone.utc)
        doc = {
            **data,
            "product_id": product_id,
            "is_active": data.get("is_active", True),
            "created_at": now,
            "updated_at": now,
        }
        doc = await self.repo.insert_one(doc)
        logger.info(f"Created variant {doc['sku']} for product {product_id}")
        return serialize_mongo_doc(doc)

    async def create_from_matrix(
        self, product_id: str, request: VariantMatrixRequest | dict
    ) -> list[dict]:
        """
        Expand a size × color selection into variants and insert them all.

        The whole batch is rejected when any pair already exists for the
        product (every colliding pair is named), when two selected colors
        truncate to the same SKU, or when a generated SKU is in use anywhere
        in the catalog. Nothing is inserted in any of these cases.
        """
        await self._require_product(product_id)
        specs = expand_matrix(product_id, request)

        pairs = [spec.pair for spec in specs]
        existing = await self.repo.find_by_product_and_pairs(product_id, pairs)
        duplicates = find_duplicate_pairs(
            ((doc["size"], doc["color"]) for doc in existing), pairs
        )
        if duplicates:
            logger.warning(f"Matrix for product {product_id} rejected, duplicates: {duplicates}")
            raise DuplicateVariantError(duplicates)

        skus = [spec.sku for spec in specs]
        repeated = find_repeated(skus)
        if repeated:
            logger.warning(f"Matrix for product {product_id} rejected, repeated SKUs: {repeated}")
            raise DuplicateSkuError(repeated)
        await self._ensure_sku_free(skus)

        now = datetime.now(timezone.utc)
        docs = [
            {**spec.to_document(), "created_at": now, "updated_at": now}
            for spec in specs
        ]
        await self.repo.insert_many(docs)
        logger.info(f"Created {len(docs)} variants for product {product_id} from matrix")
        return serialize_mongo_doc(await self.repo.find_by_product(product_id)) or []

    async def duplicate_variant(
        self, product_id: str, variant_id: str, modifications: dict
    ) -> dict:
        """Copy a variant with overrides. The SKU is regenerated unless given."""
        original = await self._require_variant(product_id, variant_id)
        mods = {k: v for k, v in modifications.items() if v is not None}

        size = mods.get("size", original["size"])
        color = mods.get("color", original["color"])
        data = {
            "size": size,
            "color": color,
            "material": mods.get("material", original.get("material")),
            "sku": mods.get("sku") or generate_sku(sku_prefix(original["sku"]), size, color),
            "price": mods.get("price", original.get("price")),
            "compare_price": mods.get("compare_price", original.get("compare_price")),
            "cost_price": mods.get("cost_price", original.get("cost_price")),
            "stock": mods.get("stock", original.get("stock", 0)),
            "low_stock_threshold": mods.get(
                "low_stock_threshold", original.get("low_stock_threshold", 0)
            ),
            "weight": mods.get("weight", original.get("weight")),
            "is_active": mods.get("is_active", original.get("is_active", True)),
        }
        return await self.create_variant(product_id, data)

    # ── Updates ──────────────────────────────────────────────────
    async def update_variant(self, product_id: str, variant_id: str, update_data: dict) -> dict:
        variant = await self._require_variant(product_id, variant_id)
        clean = {k: v for k, v in update_data.items() if v is not None}

        if "size" in clean or "color" in clean:
            size = clean.get("size", variant["size"])
            color = clean.get("color", variant["color"])
            clash = await self.repo.find_pair(product_id, size, color, exclude_id=variant["_id"])
            if clash:
                raise DuplicateVariantError([(size, color)])

        if "sku" in clean and clean["sku"] != variant.get("sku"):
            await self._ensure_sku_free([clean["sku"]], exclude_id=variant["_id"])

        if not clean:
            return serialize_mongo_doc(variant)

        updated = await self.repo.update(variant["_id"], clean)
        if not updated:
            raise NotFoundError("Variant not found")
        logger.info(f"Updated variant {variant_id}: {sorted(clean)}")
        return serialize_mongo_doc(updated)

    async def bulk_update(self, product_id: str, variant_ids: list[str], update_data: dict) -> list[dict]:
        """Apply the same field values to several variants of one product."""
        clean = {k: v for k, v in update_data.items() if v is not None}
        touched = [f for f in _IDENTITY_FIELDS if f in clean]
        if touched:
            raise ValidationError(
                f"Bulk update cannot change {', '.join(touched)}; update variants individually"
            )

        oids = [parse_object_id(vid, "variant ID") for vid in variant_ids]
        found = await self.repo.find_by_ids(oids)
        found_ids = {doc["_id"] for doc in found if doc.get("product_id") == product_id}
        missing = [vid for vid, oid in zip(variant_ids, oids) if oid not in found_ids]
        if missing:
            raise NotFoundError(f"Variants not found: {', '.join(missing)}")

        if not clean:
            return serialize_mongo_doc(found) or []

        updated = await self.repo.update_many(oids, clean)
        logger.info(f"Bulk updated {len(oids)} variants of product {product_id}")
        return serialize_mongo_doc(updated) or []

    async def set_stock(self, product_id: str, variant_id: str, quantity: int) -> dict:
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        variant = await self._require_variant(product_id, variant_id)
        updated = await self.repo.update(variant["_id"], {"stock": quantity})
        return serialize_mongo_doc(updated)

    async def adjust_stock(self, product_id: str, variant_id: str, adjustment: int) -> dict:
        """Add `adjustment` to the stock; the result never drops below zero."""
        variant = await self._require_variant(product_id, variant_id)
        new_stock = adjust_stock(variant.get("stock", 0), adjustment)
        updated = await self.repo.update(variant["_id"], {"stock": new_stock})
        logger.info(
            f"Stock of variant {variant_id} adjusted by {adjustment}: "
            f"{variant.get('stock', 0)} -> {new_stock}"
        )
        return serialize_mongo_doc(updated)

    async def delete_variant(self, product_id: str, variant_id: str) -> dict:
        variant = await self._require_variant(product_id, variant_id)
        if not await self.repo.delete(variant["_id"]):
            raise NotFoundError("Variant not found")
        logger.info(f"Deleted variant {variant_id} of product {product_id}")
        return {"message": "Variant deleted successfully"}
