"""
Router FastAPI — endpoints product_builder (édition admin + aperçu de prix).

GET  /product-builder/blocks                   → types de blocs + JSON schemas
GET  /product-builder/templates                → modèles disponibles
GET  /product-builder/templates/{type}         → BlockSchema du modèle
GET  /product-builder/default-config/{type}    → config initiale d'un bloc ajouté
POST /product-builder/validate                 → BlockSchema → {"valid", "issues"}
POST /product-builder/resolve                  → {schema, selection} → Resolution
POST /product-builder/quote                    → {schema, selection, qty?, qtys?} → PriceQuote(s)

Le catalogue vient de la dépendance get_catalog : l'application la remplace
(app.dependency_overrides) par le catalogue chargé depuis la DB.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import Field

from .blocks import BLOCK_CLASSES
from .blocks.base import CamelModel
from .catalog import OptionCatalog, default_catalog
from .errors import ProductBuilderError
from .pricing import PriceCalculator
from .resolver import resolve
from .schema import BlockSchema
from .selection import Selection
from .templates import TEMPLATE_NAMES, default_config, template

log = logging.getLogger(__name__)

router = APIRouter(prefix="/product-builder", tags=["product_builder"])


def get_catalog() -> OptionCatalog:
    return default_catalog()


class SelectionRequest(CamelModel):
    product_schema: BlockSchema = Field(alias="schema")
    selection: Optional[Selection] = None
    qty: Optional[int] = None
    qtys: List[int] = Field(default_factory=list)

    def current(self) -> Selection:
        return self.selection or Selection.from_schema(self.product_schema)


@router.get("/blocks", summary="Liste les types de blocs et leurs schemas")
def blocks() -> JSONResponse:
    data = []
    for cls in BLOCK_CLASSES:
        for block_type in cls.model_fields["type"].annotation.__args__:
            data.append({"type": block_type, "schema": cls.model_json_schema(by_alias=True)})
    return JSONResponse({"blocks": data})


@router.get("/templates", summary="Liste les modèles de produit")
def templates() -> dict:
    return {"templates": [{"productType": k, "name": v} for k, v in TEMPLATE_NAMES.items()]}


@router.get("/templates/{product_type}", summary="Schéma d'un modèle de produit")
def template_schema(product_type: str) -> dict:
    try:
        schema = template(product_type)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Modèle '{product_type}' inconnu")
    return schema.model_dump(by_alias=True, mode="json")


@router.get("/default-config/{block_type}", summary="Config initiale d'un nouveau bloc")
def block_default_config(block_type: str) -> dict:
    try:
        return default_config(block_type)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Type de bloc '{block_type}' inconnu")


@router.post("/validate", summary="Valide un schéma sans l'enregistrer")
def validate(schema: BlockSchema, catalog: OptionCatalog = Depends(get_catalog)) -> dict:
    issues = schema.validate_schema(catalog)
    return {
        "valid":  not issues,
        "issues": [i.model_dump(by_alias=True, mode="json") for i in issues],
    }


@router.post("/resolve", summary="Résout une sélection (options désactivées, erreurs)")
def resolve_selection(req: SelectionRequest, catalog: OptionCatalog = Depends(get_catalog)) -> dict:
    res = resolve(req.product_schema, req.current(), catalog)
    return res.model_dump(by_alias=True, mode="json")


@router.post("/quote", summary="Calcule le prix d'une sélection")
def quote(req: SelectionRequest, catalog: OptionCatalog = Depends(get_catalog)) -> dict:
    calc = PriceCalculator(catalog)
    sel = req.current()
    try:
        selected = calc.quote(req.product_schema, sel, req.qty)
        by_qty = calc.quote_many(req.product_schema, sel, req.qtys) if req.qtys else {}
    except ProductBuilderError as e:
        return JSONResponse(e.to_dict(), status_code=422)
    return {
        "selected": selected.model_dump(by_alias=True, mode="json"),
        "byQty":    {str(q): p.model_dump(by_alias=True, mode="json") if p else None for q, p in by_qty.items()},
    }
