"""Tests router /product-builder — catalogue de blocs, modèles, validation, devis."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from product_builder import block_types, default_config, new_block, template
from product_builder.router import router


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


# ── Modèles / config par défaut ─────────────────────────────────────────────

class TestTemplateHelpers:
    def test_block_types(self):
        types = block_types()
        assert "pages_saddle" in types
        assert "inner_layer_leaf" in types
        assert len(types) == 17

    def test_variant_default_config(self):
        cfg = default_config("pages_saddle")
        assert (cfg["min"], cfg["max"], cfg["step"], cfg["maxThickness"]) == (8, 48, 4, 2.5)
        assert default_config("inner_layer_saddle")["single"] is False

    def test_new_block(self):
        block = new_block("quantity", 12, "수량")
        assert block.id == "12"
        assert block.config.options == [50, 100, 200, 500, 1000]

    def test_unknown_block_type(self):
        with pytest.raises(KeyError):
            new_block("hologram", 1)


# ── Endpoints ───────────────────────────────────────────────────────────────

class TestRouter:
    def test_blocks_catalog(self, client):
        r = client.get("/product-builder/blocks")
        assert r.status_code == 200
        types = [b["type"] for b in r.json()["blocks"]]
        assert "spring_options" in types
        assert all("schema" in b for b in r.json()["blocks"])

    def test_templates(self, client):
        r = client.get("/product-builder/templates")
        assert {t["productType"] for t in r.json()["templates"]} == {"flyer", "perfect", "saddle", "spring"}

    def test_template_schema(self, client):
        r = client.get("/product-builder/templates/saddle")
        assert r.status_code == 200
        assert r.json()["productType"] == "saddle"
        assert client.get("/product-builder/templates/poster").status_code == 404

    def test_default_config(self, client):
        assert client.get("/product-builder/default-config/size").json()["default"] == "a4"
        assert client.get("/product-builder/default-config/hologram").status_code == 404

    def test_validate(self, client):
        data = template("flyer").model_dump(by_alias=True, mode="json")
        assert client.post("/product-builder/validate", json=data).json() == {"valid": True, "issues": []}
        data["blocks"][0]["config"]["default"] = "a3"
        body = client.post("/product-builder/validate", json=data).json()
        assert body["valid"] is False
        assert body["issues"][0]["kind"] == "InvalidDefault"
        assert body["issues"][0]["affectedBlockId"] == "1"

    def test_resolve(self, client):
        schema = template("spring").model_dump(by_alias=True, mode="json")
        r = client.post("/product-builder/resolve", json={
            "schema": schema, "selection": {"size": "a4", "pp": "none", "coverPrint": "none"},
        })
        kinds = [e["kind"] for e in r.json()["errors"]]
        assert "MissingCoverSource" in kinds

    def test_quote_defaults(self, client):
        schema = template("flyer").model_dump(by_alias=True, mode="json")
        r = client.post("/product-builder/quote", json={"schema": schema, "qty": 100, "qtys": [100, 500]})
        assert r.status_code == 200
        body = r.json()
        assert body["selected"]["unitPrice"] == 251
        assert body["byQty"]["500"]["unitPrice"] == 203

    def test_quote_table_unpriceable_qty_is_null(self, client):
        schema = template("flyer").model_dump(by_alias=True, mode="json")
        r = client.post("/product-builder/quote", json={"schema": schema, "qty": 100, "qtys": [30, 100]})
        assert r.status_code == 200
        assert r.json()["byQty"] == {"30": None, "100": r.json()["selected"]}

    def test_quote_invalid_selection(self, client):
        schema = template("flyer").model_dump(by_alias=True, mode="json")
        sel = {"size": "a3", "paper": "snow", "weight": 120, "color": "color", "side": "double",
               "delivery": "next2", "qty": 100}
        r = client.post("/product-builder/quote", json={"schema": schema, "selection": sel})
        assert r.status_code == 422
        assert r.json()["issues"][0]["kind"] == "UnknownOption"
