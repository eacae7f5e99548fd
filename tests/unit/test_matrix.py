"""Tests for SKU generation, matrix expansion and stock clamping."""

import pytest

from solestore.exceptions import InvalidMatrixRequest
from solestore.variants.matrix import (
    adjust_stock,
    expand_matrix,
    find_duplicate_pairs,
    find_repeated,
    generate_sku,
    sku_prefix,
)
from solestore.variants.schemas import VariantMatrixRequest


def _request(**overrides) -> VariantMatrixRequest:
    data = {
        "sizes": ["8", "9"],
        "colors": ["Black", "White"],
        "selected_combinations": [
            {"size": "8", "color": "Black"},
            {"size": "9", "color": "White"},
        ],
        "base_price": 120.0,
        "base_stock": 10,
        "base_low_stock_threshold": 3,
        "base_sku": "MZ",
    }
    data.update(overrides)
    return VariantMatrixRequest(**data)


class TestGenerateSku:
    def test_basic(self):
        assert generate_sku("MZ-SNK-001", "9", "Black") == "MZ-SNK-001-9-BLA"

    def test_whitespace_is_removed_before_truncation(self):
        assert generate_sku("BASE", " 10 ", "Navy Blue") == "BASE-10-NAV"
        assert generate_sku("BASE", "EU 42", "Red") == "BASE-EU42-RED"

    def test_short_colors_are_not_padded(self):
        assert generate_sku("BASE", "7", "Ox") == "BASE-7-OX"

    def test_three_letter_prefix_collides(self):
        assert generate_sku("B", "9", "Navy") == generate_sku("B", "9", "Nav")

    def test_is_stable(self):
        assert generate_sku("MZ", "9.5", "White") == generate_sku("MZ", "9.5", "White")

    def test_prefix(self):
        assert sku_prefix("MZ-9-BLA") == "MZ"


class TestExpandMatrix:
    def test_only_selected_combinations(self):
        specs = expand_matrix("p1", _request())

        assert [s.sku for s in specs] == ["MZ-8-BLA", "MZ-9-WHI"]
        for spec in specs:
            assert spec.product_id == "p1"
            assert spec.price == 120.0
            assert spec.stock == 10
            assert spec.low_stock_threshold == 3
            assert spec.is_active is True

    def test_accepts_plain_dict_and_numeric_sizes(self):
        specs = expand_matrix(
            "p1",
            {
                "sizes": [8, 9],
                "colors": ["Black"],
                "selected_combinations": [{"size": 8, "color": "Black"}],
                "base_price": 50,
                "base_sku": "mz",
            },
        )
        assert len(specs) == 1
        assert specs[0].size == "8"
        assert specs[0].sku == "mz-8-BLA"

    def test_base_sku_is_used_verbatim(self):
        specs = expand_matrix("p1", _request(base_sku="mz-snk", selected_combinations=[{"size": "9", "color": "Black"}]))
        assert specs[0].sku == generate_sku("mz-snk", "9", "Black") == "mz-snk-9-BLA"

    @pytest.mark.parametrize(
        "overrides",
        [{"sizes": []}, {"colors": []}, {"selected_combinations": []}],
    )
    def test_empty_inputs_are_rejected(self, overrides):
        with pytest.raises(InvalidMatrixRequest):
            expand_matrix("p1", _request(**overrides))

    def test_repeated_selection_is_rejected(self):
        request = _request(
            selected_combinations=[
                {"size": "8", "color": "Black"},
                {"size": "8", "color": "Black"},
            ]
        )
        with pytest.raises(InvalidMatrixRequest) as exc:
            expand_matrix("p1", request)
        assert "8/Black" in exc.value.detail

    def test_create_document(self):
        spec = expand_matrix("p1", _request())[0]
        doc = spec.to_document()
        assert doc["sku"] == "MZ-8-BLA"
        assert doc["material"] is None
        assert spec.pair == ("8", "Black")


class TestDuplicateDetection:
    def test_every_existing_pair_is_reported(self):
        existing = [("8", "Black"), ("10", "Red"), ("9", "White")]
        requested = [("8", "Black"), ("9", "White"), ("11", "Blue")]
        assert find_duplicate_pairs(existing, requested) == [("8", "Black"), ("9", "White")]

    def test_repeated_pairs(self):
        pairs = [("8", "Black"), ("9", "White"), ("8", "Black"), ("8", "Black")]
        assert find_repeated(pairs) == [("8", "Black")]

    def test_repeated_skus(self):
        assert find_repeated(["MZ-9-NAV", "MZ-8-NAV", "MZ-9-NAV"]) == ["MZ-9-NAV"]
        assert find_repeated(["A", "B"]) == []


class TestAdjustStock:
    def test_floors_at_zero(self):
        assert adjust_stock(3, -10) == 0

    def test_adds(self):
        assert adjust_stock(3, 5) == 8
        assert adjust_stock(3, -3) == 0
