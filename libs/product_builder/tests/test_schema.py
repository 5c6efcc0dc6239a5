"""
Tests BlockSchema — édition admin (enable_option / set_default) et validation à l'enregistrement.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_builder import (
    BlockSchema, ErrorKind, OutsourcedConfig, QtyDiscount, SchemaError, UnresolvedConfiguration,
    default_catalog, template, TEMPLATE_NAMES,
)


@pytest.fixture
def catalog():
    return default_catalog()


def _kinds(issues):
    return [i.kind for i in issues]


# ── Modèles ──────────────────────────────────────────────────────────────────

class TestTemplates:
    @pytest.mark.parametrize("product_type", list(TEMPLATE_NAMES))
    def test_templates_are_valid(self, product_type, catalog):
        assert template(product_type).validate_schema(catalog) == []

    def test_template_is_a_copy(self):
        a = template("flyer")
        a.enable_option(1, "a4", False)
        assert template("flyer").block(1).config.default == "a4"

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            template("poster")


# ── Accès / rôles ────────────────────────────────────────────────────────────

class TestLookup:
    def test_block_accepts_int_or_str(self):
        schema = template("perfect")
        assert schema.block(7) is schema.block("7")

    def test_dangling_id_raises(self):
        with pytest.raises(UnresolvedConfiguration) as exc:
            template("flyer").block(42)
        assert exc.value.issues[0].affected_block_id == "42"

    def test_binding(self):
        assert template("flyer").binding is None
        assert template("saddle").binding == "saddle"
        assert template("spring").binding == "spring"

    def test_roles_from_links(self):
        schema = template("perfect")
        assert schema.paper_role("2") == "cover"
        assert schema.paper_role("5") == "inner"
        assert schema.print_role("3") == "cover"
        assert schema.print_role("6") == "inner"
        assert template("flyer").paper_role("2") == "main"

    def test_binding_from_pages_block_type(self):
        schema = BlockSchema.model_validate({"productType": "leaflet", "blocks": [
            {"id": 1, "type": "pages_leaf"},
        ]})
        assert schema.binding == "perfect"


# ── enable_option ────────────────────────────────────────────────────────────

class TestEnableOption:
    def test_disabling_default_clears_it(self):
        schema = template("flyer")
        block = schema.enable_option(1, "a4", False)
        assert block.config.default is None
        assert block.locked is False

    def test_auto_lock_on_single_choice(self):
        schema = template("flyer")
        schema.enable_option(1, "a5", False)
        block = schema.enable_option(1, "b5", False)
        assert block.config.options == ["a4"]
        assert block.locked is True

    def test_re_enable_does_not_unlock(self):
        schema = template("flyer")
        schema.enable_option(1, "a5", False)
        schema.enable_option(1, "b5", False)
        block = schema.enable_option(1, "b5", True)
        assert block.locked is True

    def test_print_auto_lock(self):
        schema = template("flyer")
        schema.enable_option(3, "mono", False)
        block = schema.enable_option(3, "single", False)
        assert block.locked is True

    def test_finishing_never_auto_locks(self):
        schema = template("flyer")
        for code in ("punch", "coating", "osi", "fold"):
            schema.enable_option(4, code, False)
        assert schema.block(4).locked is False

    def test_paper_seeded_from_catalog(self, catalog):
        schema = template("flyer")
        schema.enable_option(2, "art", catalog=catalog)
        assert schema.block(2).config.papers["art"] == [100, 120, 150]

    def test_error_carries_block_id(self, catalog):
        schema = template("flyer")
        with pytest.raises(SchemaError) as exc:
            schema.enable_option(2, "snow", weight=999, catalog=catalog)
        assert exc.value.kind == ErrorKind.UNKNOWN_OPTION
        assert exc.value.block_id == "2"
        assert exc.value.issues[0].affected_block_id == "2"

    def test_spring_group(self):
        schema = template("spring")
        schema.enable_option(2, "frosted", False, group="pp")
        assert schema.block(2).config.pp.enabled_ids() == ["clear", "none"]


# ── set_default ──────────────────────────────────────────────────────────────

class TestSetDefault:
    def test_enabled_value(self):
        schema = template("flyer")
        schema.set_default(1, "b5")
        assert schema.block(1).config.default == "b5"

    def test_disabled_value_raises_invalid_default(self):
        schema = template("flyer")
        with pytest.raises(SchemaError) as exc:
            schema.set_default(1, "a3")
        assert exc.value.kind == ErrorKind.INVALID_DEFAULT
        assert exc.value.block_id == "1"

    def test_paper_default(self):
        schema = template("flyer")
        schema.set_default(2, {"paper": "mojo", "weight": 100})
        assert schema.block(2).config.default.paper == "mojo"

    def test_spring_group_default(self):
        schema = template("spring")
        schema.set_default(2, "front_only", group="coverPrint")
        assert schema.block(2).config.default_value()["cover_print"] == "front_only"


# ── validate_schema ──────────────────────────────────────────────────────────

class TestValidateSchema:
    def test_default_not_enabled(self):
        schema = template("flyer")
        schema.block(1).config.default = "a3"
        issues = schema.validate_schema()
        assert _kinds(issues) == [ErrorKind.INVALID_DEFAULT]
        assert issues[0].affected_block_id == "1"

    def test_duplicate_ids(self):
        data = template("flyer").model_dump(by_alias=True)
        data["blocks"][1]["id"] = "1"
        issues = BlockSchema.model_validate(data).validate_schema()
        assert ErrorKind.UNRESOLVED_CONFIGURATION in _kinds(issues)

    def test_unknown_catalog_paper(self, catalog):
        schema = template("flyer")
        schema.block(2).config.papers["washi"] = [90]
        issues = schema.validate_schema(catalog)
        assert [i.message for i in issues] == ["Papier inconnu : washi"]

    def test_unknown_product_type(self):
        schema = template("flyer")
        schema.product_type = "banner"
        assert _kinds(schema.validate_schema()) == [ErrorKind.UNKNOWN_OPTION]

    def test_missing_inner_link(self):
        schema = template("perfect")
        schema.block(7).config.linked_blocks.inner_print = None
        issues = schema.validate_schema()
        assert _kinds(issues) == [ErrorKind.UNRESOLVED_CONFIGURATION]
        assert issues[0].affected_block_id == "7"

    def test_link_to_wrong_block_type(self):
        schema = template("perfect")
        schema.block(7).config.linked_blocks.inner_paper = "6"
        assert _kinds(schema.validate_schema()) == [ErrorKind.UNRESOLVED_CONFIGURATION]

    def test_link_to_disabled_block(self):
        schema = template("perfect")
        schema.block(5).on = False
        assert ErrorKind.UNRESOLVED_CONFIGURATION in _kinds(schema.validate_schema())

    def test_bound_product_without_pages(self):
        schema = template("saddle")
        schema.blocks = [b for b in schema.blocks if b.type != "pages"]
        assert _kinds(schema.link_issues()) == [ErrorKind.UNRESOLVED_CONFIGURATION]

    def test_coating_linked_paper(self):
        schema = template("flyer")
        schema.block(4).config.coating.linked_paper = "9"
        assert _kinds(schema.validate_schema()) == [ErrorKind.UNRESOLVED_CONFIGURATION]
        schema.block(4).config.coating.linked_paper = "2"
        assert schema.validate_schema() == []

    def test_check_raises_with_all_issues(self):
        schema = template("flyer")
        schema.block(1).config.default = "a3"
        schema.block(6).config.default = 7
        with pytest.raises(SchemaError) as exc:
            schema.check()
        assert len(exc.value.issues) == 2
        assert exc.value.to_dict()["kind"] == "InvalidDefault"

    def test_outsourced_needs_no_links(self):
        schema = BlockSchema.model_validate({"productType": "outsourced", "blocks": [
            {"id": 1, "type": "pages_leaf"},
        ]})
        assert schema.binding is None
        assert schema.link_issues() == []


class TestOutsourcedConfig:
    def test_discount_picks_highest_reached_tier(self):
        cfg = OutsourcedConfig(qty_discounts=[
            QtyDiscount(min_qty=100, percent=5), QtyDiscount(min_qty=500, percent=10),
        ])
        assert cfg.discount(50) == 0
        assert cfg.discount(100) == 5
        assert cfg.discount(800) == 10
