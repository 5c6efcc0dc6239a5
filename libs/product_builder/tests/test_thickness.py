"""Tests épaisseur de reliure + colisage."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_builder import (
    ShippingConfig, binding_packaging, binding_thickness, default_catalog, sheet_packaging,
    shipping_cost, thickness_limit,
)
from product_builder.catalog import PaperCost
from product_builder.thickness import sheet_thickness, thickness_error


# ── Épaisseur ───────────────────────────────────────────────────────────────

class TestSheetThickness:
    def test_estimated_by_paper_factor(self):
        assert sheet_thickness(100, "snow") == pytest.approx(0.09)
        assert sheet_thickness(100, "mojo") == pytest.approx(0.115)
        assert sheet_thickness(100, "washi") == pytest.approx(0.1)

    def test_measured_thickness_wins(self):
        catalog = default_catalog()
        catalog.paper_costs.append(PaperCost(paper="snow", weight=100, cost_per_sheet=23, thickness=0.2))
        assert sheet_thickness(100, "snow", catalog) == pytest.approx(0.2)

    def test_no_weight(self):
        assert sheet_thickness(None, "snow") == 0.0


class TestBindingThickness:
    def test_saddle_ignores_cover(self):
        t = binding_thickness("saddle", 20, 80, "mojo", cover_weight=200, cover_paper="snow")
        assert t == pytest.approx(10 * 0.092)

    def test_perfect_adds_one_cover(self):
        t = binding_thickness("perfect", 100, 80, "mojo", cover_weight=250, cover_paper="snow")
        assert t == pytest.approx(50 * 0.092 + 0.225)

    def test_spring_adds_two_covers(self):
        t = binding_thickness("spring", 100, 80, "mojo", cover_weight=200, cover_paper="snow")
        assert t == pytest.approx(50 * 0.092 + 2 * 0.18)

    def test_single_sided_pages_are_sheets(self):
        t = binding_thickness("perfect", 100, 80, "mojo", inner_side="single")
        assert t == pytest.approx(100 * 0.092)


class TestThicknessLimit:
    def test_defaults(self):
        assert thickness_limit("saddle") == 2.5
        assert thickness_limit("perfect") == 50.0
        assert thickness_limit("spring", custom=18) == 18

    def test_error_message(self):
        assert thickness_error("spring", 20.0) is None
        assert thickness_error("spring", 21.6) == "스프링제본 두께 20mm 초과 (현재 : 21.6mm)"
        assert thickness_error("saddle", 3.0) == "중철제본 두께 2.5mm 초과 (현재 : 3.0mm)"


# ── Colisage / port ─────────────────────────────────────────────────────────

class TestPackaging:
    def test_sheet_packaging(self):
        p = sheet_packaging(1000, 0.1, 100)
        assert p.total_sheets == 500
        assert p.total_thickness == 50.0
        assert p.box_count == 1
        assert p.needs_freight is False

    def test_sheet_packaging_splits_boxes(self):
        p = sheet_packaging(10000, 0.1, 100, double_sided=False)
        assert p.total_sheets == 10000
        assert p.box_count == 4

    def test_binding_packaging(self):
        p = binding_packaging(100, 100)
        assert p.total_thickness == 1000.0
        assert p.box_count == 4

    def test_empty_inputs(self):
        assert sheet_packaging(0, 0.1, 100).box_count == 1
        assert binding_packaging(100, 0).total_weight == 0


class TestShippingCost:
    def test_paid_below_threshold(self):
        assert shipping_cost(3, 10000) == 12000

    def test_free_boxes_above_threshold(self):
        assert shipping_cost(3, 60000) == 8000
        assert shipping_cost(1, 60000) == 0

    def test_custom_config(self):
        cfg = ShippingConfig(fee_per_box=3000, free_boxes=2, free_threshold=100000)
        assert shipping_cost(3, 100000, cfg) == 3000

    def test_no_box(self):
        assert shipping_cost(0, 10000) == 0
