"""Tests blocs — toggle d'options, défauts, choix restants, sérialisation camelCase."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_builder import (
    BlockSchema, DeliveryBlock, ErrorKind, FinishingBlock, InnerLayerBlock, PagesBlock,
    PaperBlock, PaperChoice, PrintBlock, PrintChoice, QuantityBlock, SchemaError, SizeBlock,
    SpringOptionsBlock, default_catalog, inner_page_count,
)
from product_builder.blocks.options import CoverPrintBlock


# ── Size / listes simples ────────────────────────────────────────────────────

class TestSizeBlock:
    def test_defaults(self):
        b = SizeBlock(id=1)
        assert b.id == "1"
        assert b.config.options == ["a4", "a5", "b5"]
        assert b.config.default == "a4"

    def test_disable_default_clears_it(self):
        b = SizeBlock(id="s")
        b.config.toggle("a4", False)
        assert b.config.options == ["a5", "b5"]
        assert b.config.default is None

    def test_disable_other_keeps_default(self):
        b = SizeBlock(id="s")
        b.config.toggle("b5", False)
        assert b.config.default == "a4"

    def test_enable_unknown_size_with_catalog(self):
        b = SizeBlock(id="s")
        with pytest.raises(SchemaError) as exc:
            b.config.toggle("tabloid", True, catalog=default_catalog())
        assert exc.value.kind == ErrorKind.UNKNOWN_OPTION

    def test_set_default_not_enabled(self):
        b = SizeBlock(id="s")
        with pytest.raises(SchemaError) as exc:
            b.config.set_default("a3")
        assert exc.value.kind == ErrorKind.INVALID_DEFAULT
        assert b.config.default == "a4"

    def test_choice_count(self):
        assert SizeBlock(id="s").config.choice_count() == 3


# ── Paper ────────────────────────────────────────────────────────────────────

class TestPaperBlock:
    def test_enable_paper_seeds_three_weights(self):
        b = PaperBlock(id="p")
        b.config.toggle("inspirer", True, catalog=default_catalog())
        assert b.config.papers["inspirer"] == [105, 130, 160]

    def test_enable_weight_keeps_sorted(self):
        b = PaperBlock(id="p")
        b.config.toggle("snow", True, weight=100, catalog=default_catalog())
        assert b.config.papers["snow"] == [100, 120, 150]

    def test_unknown_weight_rejected(self):
        b = PaperBlock(id="p")
        with pytest.raises(SchemaError) as exc:
            b.config.toggle("snow", True, weight=999, catalog=default_catalog())
        assert exc.value.kind == ErrorKind.UNKNOWN_OPTION

    def test_disable_default_weight_clears_default(self):
        b = PaperBlock(id="p")
        b.config.toggle("snow", False, weight=120)
        assert b.config.papers["snow"] == [150]
        assert b.config.default is None

    def test_disable_paper_removes_all_weights(self):
        b = PaperBlock(id="p")
        b.config.toggle("mojo", False)
        assert "mojo" not in b.config.papers
        assert b.config.default == PaperChoice(paper="snow", weight=120)

    def test_accepts_dict_or_model(self):
        cfg = PaperBlock(id="p").config
        assert cfg.accepts({"paper": "mojo", "weight": 80})
        assert cfg.accepts(PaperChoice(paper="snow", weight=150))
        assert not cfg.accepts({"paper": "snow", "weight": 80})
        assert not cfg.accepts("snow")

    def test_option_codes(self):
        assert PaperBlock(id="p").config.option_codes() == ["snow:120", "snow:150", "mojo:80", "mojo:100"]


# ── Print ────────────────────────────────────────────────────────────────────

class TestPrintBlock:
    def test_choice_count_is_color_by_side(self):
        cfg = PrintBlock(id="x").config
        assert cfg.choice_count() == 4
        cfg.toggle("mono", False)
        assert cfg.choice_count() == 2

    def test_disable_default_side_clears_default(self):
        cfg = PrintBlock(id="x").config
        cfg.toggle("double", False)
        assert cfg.default is None

    def test_unknown_flag(self):
        with pytest.raises(SchemaError):
            PrintBlock(id="x").config.toggle("cmyk", True)

    def test_set_default(self):
        cfg = PrintBlock(id="x").config
        cfg.set_default({"color": "mono", "side": "single"})
        assert cfg.default == PrintChoice(color="mono", side="single")


# ── Finishing ────────────────────────────────────────────────────────────────

class TestFinishingBlock:
    def test_optional_by_default(self):
        assert FinishingBlock(id="f").optional is True

    def test_toggle_groups(self):
        cfg = FinishingBlock(id="f").config
        cfg.toggle("coating", True)
        cfg.toggle("gloss", False, group="coating")
        cfg.toggle("fold", True)
        cfg.toggle(3, True, group="fold")
        cfg.toggle(2, True, group="fold")
        assert cfg.coating.enabled
        assert cfg.coating.types == ["matte"]
        assert cfg.fold.options == [2, 3]

    def test_unknown_group(self):
        with pytest.raises(SchemaError):
            FinishingBlock(id="f").config.toggle("x", True, group="laminate")

    def test_disable_resets_incompatible_default(self):
        cfg = FinishingBlock(id="f").config
        cfg.set_default({"corner": True})
        cfg.toggle("corner", False)
        assert cfg.default.corner is False

    def test_coating_weight_range(self):
        coating = FinishingBlock(id="f").config.coating
        assert not coating.weight_allowed(150)
        assert coating.weight_allowed(151)
        assert coating.weight_allowed(None)
        coating.max_weight = 250
        assert not coating.weight_allowed(300)
        assert coating.range_label() == "151~250g"

    def test_no_auto_lock(self):
        assert FinishingBlock(id="f").config.choice_count() is None


# ── Spring options ───────────────────────────────────────────────────────────

class TestSpringOptionsBlock:
    def test_group_defaults(self):
        cfg = SpringOptionsBlock(id="s").config
        assert cfg.default_value() == {
            "pp": "clear", "cover_print": "none", "back": "white", "spring_color": "black",
        }

    def test_camel_alias_group(self):
        cfg = SpringOptionsBlock(id="s").config
        cfg.toggle("front_back", False, group="coverPrint")
        assert "front_back" not in cfg.cover_print.enabled_ids()

    def test_disable_default_option(self):
        cfg = SpringOptionsBlock(id="s").config
        cfg.toggle("clear", False, group="pp")
        assert cfg.pp.default_id() is None

    def test_disabled_group_has_no_options(self):
        cfg = SpringOptionsBlock(id="s").config
        cfg.back.enabled = False
        assert not cfg.accepts("white", "back")

    def test_cover_paper_group(self):
        cfg = SpringOptionsBlock(id="s").config
        cfg.toggle("snow", False, group="paper", weight=200)
        assert cfg.cover_print.default_paper is None
        with pytest.raises(SchemaError) as exc:
            cfg.set_default({"paper": "snow", "weight": 200}, group="paper")
        assert exc.value.kind == ErrorKind.INVALID_DEFAULT

    def test_unknown_group(self):
        with pytest.raises(SchemaError):
            SpringOptionsBlock(id="s").config.toggle("x", True, group="ring")


class TestCoverPrintBlock:
    def test_paper_and_options_share_toggle(self):
        cfg = CoverPrintBlock(id="c").config
        cfg.toggle("front_back", False)
        cfg.toggle("mojo", False)
        assert cfg.options == ["none", "front_only"]
        assert "mojo" not in cfg.papers
        assert cfg.default_paper == PaperChoice(paper="snow", weight=200)


# ── Delivery / Quantity ──────────────────────────────────────────────────────

class TestDeliveryBlock:
    def test_fixed_options(self):
        cfg = DeliveryBlock(id="d").config
        assert cfg.option_codes() == ["same", "next1", "next2", "next3"]
        assert cfg.percent("same") == 30
        assert cfg.percent("next3") == -5

    def test_disabled_option_has_no_percent(self):
        cfg = DeliveryBlock(id="d").config
        cfg.toggle("same", False)
        assert cfg.percent("same") == 0
        assert not cfg.accepts("same")

    def test_unknown_option(self):
        with pytest.raises(SchemaError):
            DeliveryBlock(id="d").config.toggle("tomorrow", True)


class TestQuantityBlock:
    def test_toggle_keeps_sorted(self):
        cfg = QuantityBlock(id="q").config
        cfg.toggle(300, True)
        assert cfg.options == [50, 100, 200, 300, 500, 1000]

    def test_custom_quantity(self):
        cfg = QuantityBlock(id="q").config
        assert not cfg.accepts(250)
        cfg.allow_custom = True
        assert cfg.accepts(250)
        assert not cfg.accepts(9999)

    def test_contact_threshold(self):
        cfg = QuantityBlock(id="q").config
        assert not cfg.contact_required(100000)
        cfg.contact_threshold = 1000
        assert cfg.contact_required(1000)
        assert not cfg.contact_required(999)


# ── Pages ────────────────────────────────────────────────────────────────────

class TestPagesBlock:
    def test_inner_page_count(self):
        assert inner_page_count(24, "saddle") == 20
        assert inner_page_count(24, "leaf") == 24
        assert inner_page_count(2, "saddle") == 0

    def test_binding_type_from_variant(self):
        assert PagesBlock(id="p", type="pages_saddle").binding_type == "saddle"
        assert PagesBlock(id="p", type="pages_leaf").binding_type == "leaf"
        assert PagesBlock(id="p").binding_type == "saddle"

    def test_accepts_step(self):
        cfg = PagesBlock(id="p").config
        assert cfg.accepts(12)
        assert not cfg.accepts(14)
        assert not cfg.accepts(52)
        assert not cfg.accepts(True)

    def test_linked_ids_coerced(self):
        b = PagesBlock.model_validate({"id": 7, "config": {"linkedBlocks": {"innerPaper": 5}}})
        assert b.config.linked_blocks.inner_paper == "5"

    def test_inner_layer_groups(self):
        cfg = InnerLayerBlock(id="i").config
        cfg.toggle("mono", False, group="print")
        cfg.toggle("mojo", False, weight=80)
        assert cfg.default_paper is None
        assert cfg.accepts({"color": "color", "side": "double"}, "print")
        assert not cfg.accepts({"color": "mono", "side": "double"}, "print")
        cfg.set_default(20)
        assert cfg.default_value() == 20


# ── Union discriminée ────────────────────────────────────────────────────────

class TestBlockUnion:
    def test_round_trip_by_type(self):
        schema = BlockSchema.model_validate({"blocks": [
            {"id": 1, "type": "size", "config": {"options": ["a4"], "default": "a4"}},
            {"id": 2, "type": "pages_leaf", "config": {"min": 10, "max": 100, "step": 2, "default": 20}},
            {"id": 3, "type": "spring_options"},
        ]})
        assert isinstance(schema.blocks[0], SizeBlock)
        assert isinstance(schema.blocks[1], PagesBlock)
        assert isinstance(schema.blocks[2], SpringOptionsBlock)
        dumped = schema.model_dump(by_alias=True, mode="json")
        assert dumped["productType"] == "flyer"
        assert BlockSchema.model_validate(dumped).model_dump(by_alias=True, mode="json") == dumped

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            BlockSchema.model_validate({"blocks": [{"id": 1, "type": "hologram"}]})
