"""
Tests API produits — CRUD + édition du schéma (options, défauts, blocs).
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient

from product_builder import template


# ── Fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def client(tmp_path):
    """Client de test avec DB SQLite temporaire (modèles + catalogue seedés)."""
    os.environ["DB_PATH"] = str(tmp_path / "test.db")

    from src.api.main import app
    from src.database import ENGINE, catalog_cache, init_db
    from src.models import Base
    Base.metadata.drop_all(bind=ENGINE)
    init_db()
    catalog_cache.purge()

    with TestClient(app) as c:
        yield c


def _product_id(client, product_type: str) -> int:
    products = client.get("/api/products").json()
    return next(p["productId"] for p in products if p["productType"] == product_type)


def _flyer_payload(name: str = "전단지 테스트") -> dict:
    return {"name": name, "productType": "flyer",
            "schema": template("flyer").model_dump(by_alias=True, mode="json")}


# ── CRUD ──────────────────────────────────────────────────────────────────

class TestProductsCrud:
    def test_templates_seeded(self, client):
        r = client.get("/api/products")
        assert r.status_code == 200
        assert {p["productType"] for p in r.json()} == {"flyer", "perfect", "saddle", "spring"}
        assert "schema" not in r.json()[0]

    def test_get_product(self, client):
        pid = _product_id(client, "saddle")
        body = client.get(f"/api/products/{pid}").json()
        assert body["schema"]["productType"] == "saddle"
        assert body["schema"]["blocks"]

    def test_get_unknown_404(self, client):
        assert client.get("/api/products/999").status_code == 404

    def test_create(self, client):
        r = client.post("/api/products", json=_flyer_payload())
        assert r.status_code == 201
        pid = r.json()["productId"]
        assert client.get(f"/api/products/{pid}").json()["name"] == "전단지 테스트"
        assert len(client.get("/api/products").json()) == 5

    def test_create_invalid_default_rejected(self, client):
        payload = _flyer_payload()
        payload["schema"]["blocks"][0]["config"]["default"] = "a3"
        r = client.post("/api/products", json=payload)
        assert r.status_code == 422
        body = r.json()
        assert body["kind"] == "InvalidDefault"
        assert body["issues"][0]["affectedBlockId"] == "1"
        assert len(client.get("/api/products").json()) == 4

    def test_update(self, client):
        pid = client.post("/api/products", json=_flyer_payload()).json()["productId"]
        payload = _flyer_payload("명함")
        payload["addons"] = [{"optionId": "file", "name": "파일 검수", "price": 3000}]
        r = client.put(f"/api/products/{pid}", json=payload)
        assert r.status_code == 200
        assert r.json()["name"] == "명함"
        assert r.json()["addons"][0]["optionId"] == "file"

    def test_delete(self, client):
        pid = client.post("/api/products", json=_flyer_payload()).json()["productId"]
        assert client.delete(f"/api/products/{pid}").json() == {"deleted": pid}
        assert client.get(f"/api/products/{pid}").status_code == 404


# ── Édition du schéma ─────────────────────────────────────────────────────

class TestSchemaEditing:
    def test_disable_option_persisted(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/options", json={"blockId": "1", "code": "a4", "enabled": False})
        assert r.status_code == 200
        assert r.json()["block"]["config"]["default"] is None
        size = client.get(f"/api/products/{pid}").json()["schema"]["blocks"][0]
        assert "a4" not in size["config"]["options"]

    def test_auto_lock(self, client):
        pid = _product_id(client, "flyer")
        client.post(f"/api/products/{pid}/options", json={"blockId": "1", "code": "a5", "enabled": False})
        r = client.post(f"/api/products/{pid}/options", json={"blockId": "1", "code": "b5", "enabled": False})
        assert r.json()["block"]["locked"] is True

    def test_unknown_weight_rejected(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/options",
                        json={"blockId": "2", "code": "snow", "weight": 999})
        assert r.status_code == 422
        assert r.json()["issues"][0]["kind"] == "UnknownOption"
        assert r.json()["issues"][0]["affectedBlockId"] == "2"

    def test_unknown_block(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/options", json={"blockId": "42", "code": "a4"})
        assert r.status_code == 422
        assert r.json()["kind"] == "UnresolvedConfiguration"

    def test_set_default(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/default", json={"blockId": "1", "value": "b5"})
        assert r.status_code == 200
        size = client.get(f"/api/products/{pid}").json()["schema"]["blocks"][0]
        assert size["config"]["default"] == "b5"

    def test_set_disabled_default_rejected(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/default", json={"blockId": "1", "value": "a3"})
        assert r.status_code == 422
        assert r.json()["kind"] == "InvalidDefault"

    def test_add_block(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/blocks", json={"type": "pp", "label": "PP"})
        assert r.status_code == 201
        assert r.json()["block"]["id"] == "7"
        blocks = client.get(f"/api/products/{pid}").json()["schema"]["blocks"]
        assert blocks[-1]["type"] == "pp"

    def test_add_unknown_block_type(self, client):
        pid = _product_id(client, "flyer")
        r = client.post(f"/api/products/{pid}/blocks", json={"type": "hologram"})
        assert r.status_code == 400
