"""VariantService tests against the in-memory repository."""

import pytest
from bson import ObjectId

from solestore.exceptions import (
    DuplicateSkuError,
    DuplicateVariantError,
    InvalidMatrixRequest,
    NotFoundError,
    ValidationError,
)
from solestore.variants.service import VariantService


@pytest.fixture
def service(variant_repo) -> VariantService:
    return VariantService(None, repository=variant_repo)


def _matrix(**overrides) -> dict:
    data = {
        "sizes": ["8", "9", "10"],
        "colors": ["Black", "White"],
        "selected_combinations": [
            {"size": "8", "color": "Black"},
            {"size": "9", "color": "White"},
        ],
        "base_price": 99.0,
        "base_stock": 4,
        "base_low_stock_threshold": 2,
        "base_sku": "MZ-RUN",
    }
    data.update(overrides)
    return data


def _variant(product_id, **fields) -> dict:
    return {
        "product_id": product_id,
        "size": "8",
        "color": "Black",
        "sku": "MZ-RUN-8-BLA",
        "price": 99.0,
        "stock": 5,
        "low_stock_threshold": 2,
        **fields,
    }


class TestCreateFromMatrix:
    async def test_creates_selected_variants(self, service, variant_repo, product_id):
        variants = await service.create_from_matrix(product_id, _matrix())

        assert [v["sku"] for v in variants] == ["MZ-RUN-8-BLA", "MZ-RUN-9-WHI"]
        assert all(v["stock"] == 4 and v["is_active"] for v in variants)
        assert variant_repo.insert_calls == 1

    async def test_existing_pair_rejects_whole_batch(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id, sku="OLD-8-BLA"))

        with pytest.raises(DuplicateVariantError) as exc:
            await service.create_from_matrix(product_id, _matrix())

        assert exc.value.pairs == [("8", "Black")]
        assert "8/Black" in exc.value.detail
        assert exc.value.status_code == 409
        assert variant_repo.insert_calls == 0
        assert len(variant_repo.docs) == 1

    async def test_every_colliding_pair_is_named(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id, sku="OLD-8-BLA"))
        variant_repo.add(**_variant(product_id, size="9", color="White", sku="OLD-9-WHI"))

        with pytest.raises(DuplicateVariantError) as exc:
            await service.create_from_matrix(product_id, _matrix())

        assert exc.value.pairs == [("8", "Black"), ("9", "White")]
        assert exc.value.data == {
            "duplicates": [{"size": "8", "color": "Black"}, {"size": "9", "color": "White"}]
        }

    async def test_sku_used_by_another_product(self, service, variant_repo, product_id):
        other = str(ObjectId())
        variant_repo.add(**_variant(other, size="9", color="White", sku="MZ-RUN-9-WHI"))

        with pytest.raises(DuplicateSkuError) as exc:
            await service.create_from_matrix(product_id, _matrix())

        assert exc.value.skus == ["MZ-RUN-9-WHI"]
        assert variant_repo.insert_calls == 0

    async def test_colors_truncating_to_one_sku_are_rejected(self, service, variant_repo, product_id):
        request = _matrix(
            colors=["Navy", "Navy Blue"],
            selected_combinations=[
                {"size": "9", "color": "Navy"},
                {"size": "9", "color": "Navy Blue"},
            ],
        )

        with pytest.raises(DuplicateSkuError) as exc:
            await service.create_from_matrix(product_id, request)

        assert exc.value.skus == ["MZ-RUN-9-NAV"]
        assert variant_repo.insert_calls == 0
        assert variant_repo.docs == {}

    async def test_repository_rejects_repeated_skus_as_a_batch(self, variant_repo, product_id):
        docs = [
            {"product_id": product_id, "size": "9", "color": "Navy", "sku": "X-9-NAV"},
            {"product_id": product_id, "size": "9", "color": "Navy Blue", "sku": "X-9-NAV"},
        ]
        with pytest.raises(DuplicateSkuError):
            await variant_repo.insert_many(docs)
        assert variant_repo.docs == {}

    async def test_same_pair_on_another_product_is_fine(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(str(ObjectId()), sku="OTHER-8-BLA"))

        variants = await service.create_from_matrix(product_id, _matrix())
        assert len(variants) == 2

    async def test_unknown_product(self, service):
        with pytest.raises(NotFoundError):
            await service.create_from_matrix(str(ObjectId()), _matrix())

    async def test_empty_selection(self, service, variant_repo, product_id):
        with pytest.raises(InvalidMatrixRequest):
            await service.create_from_matrix(product_id, _matrix(selected_combinations=[]))
        assert variant_repo.insert_calls == 0


class TestSingleVariant:
    async def test_create_and_list_sorted(self, service, product_id):
        await service.create_variant(product_id, _variant(product_id, size="9", sku="A-9-BLA"))
        await service.create_variant(product_id, _variant(product_id, size="10", sku="A-10-BLA"))

        variants = await service.list_variants(product_id)
        assert [v["size"] for v in variants] == ["10", "9"]

    async def test_duplicate_pair(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id))

        with pytest.raises(DuplicateVariantError):
            await service.create_variant(product_id, _variant(product_id, sku="NEW-SKU"))

    async def test_duplicate_sku(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id))

        with pytest.raises(DuplicateSkuError):
            await service.create_variant(product_id, _variant(product_id, size="11"))

    async def test_variant_of_other_product_is_not_found(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(str(ObjectId())))

        with pytest.raises(NotFoundError):
            await service.get_variant(product_id, str(doc["_id"]))

    async def test_malformed_id(self, service, product_id):
        with pytest.raises(ValidationError):
            await service.get_variant(product_id, "not-an-id")

    async def test_update_into_existing_pair(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id))
        other = variant_repo.add(**_variant(product_id, size="9", sku="MZ-RUN-9-BLA"))

        with pytest.raises(DuplicateVariantError):
            await service.update_variant(product_id, str(other["_id"]), {"size": "8"})

    async def test_update_keeping_own_sku(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id))

        updated = await service.update_variant(
            product_id, str(doc["_id"]), {"sku": "MZ-RUN-8-BLA", "price": 80.0}
        )
        assert updated["price"] == 80.0

    async def test_delete(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id))

        await service.delete_variant(product_id, str(doc["_id"]))
        assert variant_repo.docs == {}

    async def test_duplicate_regenerates_sku(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id))

        copy = await service.duplicate_variant(product_id, str(doc["_id"]), {"size": "11"})
        assert copy["sku"] == "MZ-11-BLA"
        assert copy["price"] == 99.0


class TestStock:
    async def test_adjustment_is_clamped(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id, stock=3))

        updated = await service.adjust_stock(product_id, str(doc["_id"]), -10)
        assert updated["stock"] == 0

    async def test_adjustment_adds(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id, stock=3))

        updated = await service.adjust_stock(product_id, str(doc["_id"]), 5)
        assert updated["stock"] == 8

    async def test_set_stock(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id, stock=3))

        updated = await service.set_stock(product_id, str(doc["_id"]), 12)
        assert updated["stock"] == 12

        with pytest.raises(ValidationError):
            await service.set_stock(product_id, str(doc["_id"]), -1)

    async def test_low_stock(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id, stock=1))
        variant_repo.add(**_variant(product_id, size="9", sku="S-9", stock=50))
        variant_repo.add(**_variant(product_id, size="10", sku="S-10", stock=0, is_active=False))

        low = await service.low_stock(product_id)
        assert [v["sku"] for v in low] == ["MZ-RUN-8-BLA"]

    async def test_stats(self, service, variant_repo, product_id):
        variant_repo.add(**_variant(product_id, stock=0, price=100.0))
        variant_repo.add(**_variant(product_id, size="9", sku="S-9", stock=10, price=50.0))

        stats = await service.stats(product_id)
        assert stats["total_variants"] == 2
        assert stats["total_stock"] == 10
        assert stats["total_value"] == 500.0
        assert stats["out_of_stock_count"] == 1
        assert stats["low_stock_count"] == 1
        assert stats["average_price"] == 75.0


class TestBulkUpdate:
    async def test_applies_fields(self, service, variant_repo, product_id):
        a = variant_repo.add(**_variant(product_id))
        b = variant_repo.add(**_variant(product_id, size="9", sku="S-9"))

        updated = await service.bulk_update(
            product_id, [str(a["_id"]), str(b["_id"])], {"price": 60.0, "stock": None}
        )
        assert {v["price"] for v in updated} == {60.0}

    @pytest.mark.parametrize("field", ["size", "color", "sku"])
    async def test_identity_fields_are_rejected(self, service, variant_repo, product_id, field):
        a = variant_repo.add(**_variant(product_id))

        with pytest.raises(ValidationError):
            await service.bulk_update(product_id, [str(a["_id"])], {field: "X"})

    async def test_missing_ids(self, service, variant_repo, product_id):
        a = variant_repo.add(**_variant(product_id))
        missing = str(ObjectId())

        with pytest.raises(NotFoundError) as exc:
            await service.bulk_update(product_id, [str(a["_id"]), missing], {"price": 1.0})
        assert missing in exc.value.detail

    async def test_sku_available(self, service, variant_repo, product_id):
        doc = variant_repo.add(**_variant(product_id))

        assert await service.sku_available("FREE-SKU") is True
        assert await service.sku_available("MZ-RUN-8-BLA") is False
        assert await service.sku_available("MZ-RUN-8-BLA", exclude_id=str(doc["_id"])) is True
