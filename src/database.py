"""SQLite — init + session + seed catalogue / modèles + CRUD helpers"""
import json, logging, os
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from product_builder import BlockSchema, OptionCatalog, TTLCache, default_catalog, template, TEMPLATE_NAMES
from product_builder.catalog import BindingCost, CostBand, Paper, PaperCost, PrintCostTier, SizeInfo

from .models import (
    Base, BindingCostDB, FinishingCostDB, PaperCostDB, PaperDB, PrintCostDB, ProductDB, SizeDB,
)

log = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
DATA_DIR.mkdir(exist_ok=True)

DB_PATH      = os.getenv("DB_PATH", str(DATA_DIR / "print_builder.db"))
ENGINE       = create_engine(f"sqlite:///{DB_PATH}", connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ENGINE)

CATALOG_TTL_SECONDS = float(os.getenv("CATALOG_TTL_SECONDS", "300"))

# table ORM ↔ modèle du catalogue
_CATALOG_TABLES = [
    (PaperDB,         Paper,         "papers"),
    (PaperCostDB,     PaperCost,     "paper_costs"),
    (SizeDB,          SizeInfo,      "sizes"),
    (PrintCostDB,     PrintCostTier, "print_costs"),
    (FinishingCostDB, CostBand,      "finishing_costs"),
    (BindingCostDB,   BindingCost,   "binding_costs"),
]


def init_db():
    Base.metadata.create_all(bind=ENGINE)
    with SessionLocal() as db:
        # Seed catalogue (only if table is empty)
        if db.query(PaperDB).count() == 0:
            seed_catalog(db, default_catalog())
        # Seed modèles de produit
        if db.query(ProductDB).count() == 0:
            for i, (product_type, name) in enumerate(TEMPLATE_NAMES.items(), start=1):
                db.add(ProductDB(
                    name=name, product_type=product_type, sort_order=i,
                    schema_json=template(product_type).model_dump_json(by_alias=True),
                ))
            db.commit()
            log.info("Modèles de produit créés : %s", ", ".join(TEMPLATE_NAMES))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def new_session() -> Session:
    return SessionLocal()


# ── JSON helpers ──
def jl(s: str) -> list:
    try: return json.loads(s or "[]")
    except json.JSONDecodeError: return []

def jd(o) -> str:
    return json.dumps(o, ensure_ascii=False)


# ── Catalogue ──
def seed_catalog(db: Session, catalog: OptionCatalog) -> None:
    for orm, _, attr in _CATALOG_TABLES:
        for item in getattr(catalog, attr):
            db.add(orm(**item.model_dump()))
    db.commit()
    log.info("Catalogue initialisé — %d papiers, %d formats", len(catalog.papers), len(catalog.sizes))


def load_catalog(db: Session) -> OptionCatalog:
    data = {}
    for orm, model, attr in _CATALOG_TABLES:
        rows = db.query(orm).all()
        data[attr] = [
            model.model_validate({k: getattr(r, k) for k in model.model_fields})
            for r in rows
        ]
    return OptionCatalog(**data)


def _load_catalog() -> OptionCatalog:
    with SessionLocal() as db:
        return load_catalog(db)


catalog_cache: TTLCache[OptionCatalog] = TTLCache(_load_catalog, ttl=CATALOG_TTL_SECONDS)


def get_catalog() -> OptionCatalog:
    return catalog_cache.get()


# ── Product ──
def db_create_product(db: Session, obj: ProductDB) -> ProductDB:
    db.add(obj); db.commit(); db.refresh(obj); return obj

def db_get_product(db: Session, pid: int) -> Optional[ProductDB]:
    return db.query(ProductDB).filter_by(product_id=pid).first()

def db_list_products(db: Session, active_only: bool = False) -> List[ProductDB]:
    q = db.query(ProductDB)
    if active_only: q = q.filter_by(active=True)
    return q.order_by(ProductDB.sort_order, ProductDB.product_id).all()

def db_update_product(db: Session, product: ProductDB, **kwargs) -> ProductDB:
    for k, v in kwargs.items():
        setattr(product, k, v)
    db.commit(); db.refresh(product); return product

def db_delete_product(db: Session, product: ProductDB):
    db.delete(product); db.commit()

def product_schema(product: ProductDB) -> BlockSchema:
    return BlockSchema.model_validate_json(product.schema_json or "{}")
