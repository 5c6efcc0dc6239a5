"""Catalogue d'options — données du configurateur + purge du cache (admin)."""
import os
from fastapi import APIRouter, Depends, HTTPException, Request

from product_builder import OptionCatalog, TEMPLATE_NAMES, block_types

from ...database import catalog_cache, get_catalog
from ...scheduler import scheduler_status

router = APIRouter(prefix="/api", tags=["Catalog"])


def _check_token(request: Request):
    token = request.query_params.get("token") or request.headers.get("x-admin-token", "")
    if token != os.getenv("ADMIN_TOKEN", "changeme"):
        raise HTTPException(403, "Accès refusé")
    return token


@router.get("/builder-data")
def api_builder_data(catalog: OptionCatalog = Depends(get_catalog)):
    """Tout ce dont l'éditeur et le configurateur ont besoin en un appel."""
    return {
        "papers":     [{"code": p.code, "name": p.name, "desc": p.desc} for p in catalog.papers],
        "weightsMap": catalog.weights_map(),
        "sizes":      [{"code": s.code, "name": s.name, "width": s.width, "height": s.height}
                       for s in catalog.sizes],
        "blockTypes": block_types(),
        "templates":  [{"productType": k, "name": v} for k, v in TEMPLATE_NAMES.items()],
    }


@router.post("/purge-cache")
def api_purge_cache(request: Request):
    _check_token(request)
    catalog_cache.purge()
    return {"purged": True}


@router.get("/scheduler")
def api_scheduler(request: Request):
    _check_token(request)
    return {"jobs": scheduler_status()}
