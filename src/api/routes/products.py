"""
Produits — CRUD + édition du schéma de blocs (admin).

Chaque enregistrement passe par BlockSchema.check : un schéma invalide
(défaut hors options, lien non résolu, option inconnue du catalogue) est
refusé en 422 avec la liste des anomalies.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from product_builder import BlockSchema, OptionCatalog, new_block

from ...database import (
    get_catalog, get_db, jd, jl, product_schema,
    db_create_product, db_delete_product, db_get_product, db_list_products, db_update_product,
)
from ...models import BlockAddInput, DefaultInput, OptionToggleInput, ProductDB, ProductInput

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Products"])


def _out(p: ProductDB, with_schema: bool = True) -> dict:
    data = {"productId": p.product_id, "name": p.name, "productType": p.product_type,
            "active": p.active, "sortOrder": p.sort_order, "addons": jl(p.addons)}
    if with_schema:
        data["schema"] = product_schema(p).model_dump(by_alias=True, mode="json")
    return data


def _get_or_404(db: Session, pid: int) -> ProductDB:
    p = db_get_product(db, pid)
    if not p: raise HTTPException(404, "Produit introuvable")
    return p


def _parse(data: ProductInput, catalog: OptionCatalog) -> BlockSchema:
    try:
        schema = BlockSchema.model_validate({"productType": data.product_type, **data.schema_})
    except ValidationError as e:
        raise HTTPException(422, f"Schéma invalide : {e.error_count()} erreur(s)")
    return schema.check(catalog)


def _save_schema(db: Session, p: ProductDB, schema: BlockSchema) -> ProductDB:
    return db_update_product(db, p, schema_json=schema.model_dump_json(by_alias=True))


@router.get("/products")
def api_list(active_only: bool = False, db: Session = Depends(get_db)):
    return [_out(p, with_schema=False) for p in db_list_products(db, active_only)]


@router.get("/products/{pid}")
def api_get(pid: int, db: Session = Depends(get_db)):
    return _out(_get_or_404(db, pid))


@router.post("/products", status_code=201)
def api_create(data: ProductInput, db: Session = Depends(get_db),
               catalog: OptionCatalog = Depends(get_catalog)):
    schema = _parse(data, catalog)
    p = db_create_product(db, ProductDB(
        name=data.name, product_type=schema.product_type, active=data.active, sort_order=data.sort_order,
        schema_json=schema.model_dump_json(by_alias=True), addons=jd(data.addons),
    ))
    log.info("Produit %d créé (%s)", p.product_id, p.product_type)
    return _out(p)


@router.put("/products/{pid}")
def api_update(pid: int, data: ProductInput, db: Session = Depends(get_db),
               catalog: OptionCatalog = Depends(get_catalog)):
    p = _get_or_404(db, pid)
    schema = _parse(data, catalog)
    p = db_update_product(
        db, p, name=data.name, product_type=schema.product_type, active=data.active,
        sort_order=data.sort_order, schema_json=schema.model_dump_json(by_alias=True), addons=jd(data.addons),
    )
    return _out(p)


@router.delete("/products/{pid}")
def api_delete(pid: int, db: Session = Depends(get_db)):
    db_delete_product(db, _get_or_404(db, pid))
    return {"deleted": pid}


# ── Édition du schéma ──────────────────────────────────────────────────────

@router.post("/products/{pid}/options")
def api_toggle_option(pid: int, data: OptionToggleInput, db: Session = Depends(get_db),
                      catalog: OptionCatalog = Depends(get_catalog)):
    p = _get_or_404(db, pid)
    schema = product_schema(p)
    block = schema.enable_option(data.block_id, data.code, data.enabled,
                                 group=data.group, weight=data.weight, catalog=catalog)
    _save_schema(db, p, schema)
    return {"block": block.model_dump(by_alias=True, mode="json")}


@router.post("/products/{pid}/default")
def api_set_default(pid: int, data: DefaultInput, db: Session = Depends(get_db)):
    p = _get_or_404(db, pid)
    schema = product_schema(p)
    block = schema.set_default(data.block_id, data.value, group=data.group)
    _save_schema(db, p, schema)
    return {"block": block.model_dump(by_alias=True, mode="json")}


@router.post("/products/{pid}/blocks", status_code=201)
def api_add_block(pid: int, data: BlockAddInput, db: Session = Depends(get_db)):
    p = _get_or_404(db, pid)
    schema = product_schema(p)
    next_id = max((int(b.id) for b in schema.blocks if b.id.isdigit()), default=0) + 1
    try:
        block = new_block(data.type, next_id, data.label)
    except KeyError:
        raise HTTPException(400, f"Type de bloc inconnu : {data.type}")
    schema.blocks.append(block)
    _save_schema(db, p, schema)
    return {"block": block.model_dump(by_alias=True, mode="json")}
