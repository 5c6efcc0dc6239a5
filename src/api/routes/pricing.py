"""
Calcul de prix côté configurateur client.

POST /api/calculate-price     → {selected, byQty, shipping}
POST /api/validate-selection  → Resolution (options désactivées + erreurs) + valid

Le schéma vient du corps de la requête, sinon du produit (productId), sinon
du modèle du type de produit. La sélection client est fusionnée sur les défauts
du schéma : un champ absent garde sa valeur par défaut.
"""
import logging, os
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from product_builder import (
    AddonOption, BlockSchema, OptionCatalog, PriceCalculator, PriceQuote, Selection, ShippingConfig,
    addon_total, binding_packaging, resolve, sheet_packaging, shipping_cost, template,
)
from product_builder.thickness import sheet_thickness

from ...database import db_get_product, get_catalog, get_db, jl, product_schema
from ...models import PriceRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Pricing"])


def shipping_config() -> ShippingConfig:
    return ShippingConfig(
        fee_per_box=int(os.getenv("SHIPPING_FEE_PER_BOX", "4000")),
        free_boxes=int(os.getenv("SHIPPING_FREE_BOXES", "1")),
        free_threshold=int(os.getenv("SHIPPING_FREE_THRESHOLD", "50000")),
    )


def _schema(data: PriceRequest, db: Session) -> tuple:
    """(schema, addons JSON du produit)"""
    if data.schema_:
        try:
            return BlockSchema.model_validate(data.schema_), []
        except ValidationError as e:
            raise HTTPException(422, f"Schéma invalide : {e.error_count()} erreur(s)")
    if data.product_id is not None:
        p = db_get_product(db, data.product_id)
        if not p: raise HTTPException(404, "Produit introuvable")
        return product_schema(p), jl(p.addons)
    if data.product_type:
        try:
            return template(data.product_type), []
        except KeyError:
            raise HTTPException(400, f"Type de produit inconnu : {data.product_type}")
    raise HTTPException(400, "schema, productId ou productType requis")


def _selection(schema: BlockSchema, customer: dict) -> Selection:
    base = Selection.from_schema(schema).model_dump(by_alias=True)
    merged = {**base, **customer}
    if isinstance(customer.get("finishing"), dict):
        merged["finishing"] = {**base["finishing"], **customer["finishing"]}
    try:
        return Selection.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(422, f"Sélection invalide : {e.error_count()} erreur(s)")


def _shipping(schema: BlockSchema, sel: Selection, quote: PriceQuote, catalog: OptionCatalog) -> dict:
    if schema.binding or schema.product_type == "outsourced":
        pkg = binding_packaging(quote.qty, quote.inner_pages or sel.pages or 0,
                                sel.inner_weight, sel.cover_weight)
    else:
        pkg = sheet_packaging(quote.qty, sheet_thickness(sel.weight, sel.paper, catalog),
                              sel.weight or 0, double_sided=sel.side != "single")
    cost = shipping_cost(pkg.box_count, quote.total, shipping_config())
    return {"cost": cost, "boxCount": pkg.box_count, "totalWeight": pkg.total_weight,
            "needsFreight": pkg.needs_freight}


@router.post("/calculate-price")
def api_calculate_price(data: PriceRequest, db: Session = Depends(get_db),
                        catalog: OptionCatalog = Depends(get_catalog)):
    schema, product_addons = _schema(data, db)
    sel = _selection(schema, data.customer)
    qty = data.qty or sel.qty

    options = [AddonOption.model_validate(o) for o in (data.addon_options or product_addons)]
    addons = addon_total(options, data.selected_addons)

    calc = PriceCalculator(catalog)
    now = datetime.now()
    selected = calc.quote(schema, sel, qty, addons=addons, now=now)
    by_qty = calc.quote_many(schema, sel, data.all_qtys, addons=addons, now=now) if data.all_qtys else {}
    log.info("Prix %s × %d : %d", schema.product_type, qty, selected.total)
    return {
        "selected": selected.model_dump(by_alias=True, mode="json"),
        "byQty":    {str(q): p.model_dump(by_alias=True, mode="json") if p else None for q, p in by_qty.items()},
        "shipping": _shipping(schema, sel, selected, catalog),
    }


@router.post("/validate-selection")
def api_validate_selection(data: PriceRequest, db: Session = Depends(get_db),
                           catalog: OptionCatalog = Depends(get_catalog)):
    schema, _ = _schema(data, db)
    res = resolve(schema, _selection(schema, data.customer), catalog)
    return {"valid": res.valid, **res.model_dump(by_alias=True, mode="json")}
