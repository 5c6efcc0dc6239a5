"""
PRINT_BUILDER — FastAPI app
Démarrer : uvicorn src.api.main:app --reload --port 8001
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from product_builder import ProductBuilderError, __version__
from product_builder.router import get_catalog as pb_get_catalog, router as pb_router

from ..database import get_catalog
from .routes import catalog, pricing, products

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="PRINT_BUILDER — Configurateur d'imprimés", version=__version__, docs_url="/docs")

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(ProductBuilderError)
async def product_builder_error(request: Request, exc: ProductBuilderError):
    """Schéma / sélection invalide → 422 avec {kind, message, issues}."""
    log.info("%s %s refusé : %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=422)


@app.on_event("startup")
def startup():
    from ..database import init_db
    init_db()
    log.info("DB initialisée (SQLite)")

    # Scheduler — rechargement périodique du catalogue
    try:
        from ..scheduler import start_scheduler
        start_scheduler()
    except Exception as e:
        log.warning("Scheduler non démarré : %s", e)


@app.on_event("shutdown")
def shutdown():
    from ..scheduler import stop_scheduler
    stop_scheduler()


@app.get("/health")
def health():
    return {"status": "ok", "service": "print_builder", "version": __version__}


app.include_router(products.router)
app.include_router(pricing.router)
app.include_router(catalog.router)

# éditeur de blocs : même catalogue (DB) que le calcul de prix
app.include_router(pb_router)
app.dependency_overrides[pb_get_catalog] = get_catalog
