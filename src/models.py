"""
Data models — produits (schéma de blocs JSON) + catalogue d'options (papiers, formats, grilles)
SQLAlchemy (SQLite) + Pydantic v2
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ── ORM ────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


class ProductDB(Base):
    __tablename__ = "products"
    product_id:   Mapped[int]      = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name:         Mapped[str]      = mapped_column(sa.String, nullable=False)
    product_type: Mapped[str]      = mapped_column(sa.String, nullable=False, default="flyer")
    schema_json:  Mapped[str]      = mapped_column(sa.Text, nullable=False, default="{}")
    addons:       Mapped[str]      = mapped_column(sa.Text, default="[]")
    active:       Mapped[bool]     = mapped_column(sa.Boolean, default=True)
    sort_order:   Mapped[int]      = mapped_column(sa.Integer, default=0)
    created_at:   Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)
    updated_at:   Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PaperDB(Base):
    __tablename__ = "papers"
    code:       Mapped[str] = mapped_column(sa.String, primary_key=True)
    name:       Mapped[str] = mapped_column(sa.String, nullable=False)
    desc:       Mapped[str] = mapped_column(sa.String, default="")
    sort_order: Mapped[int] = mapped_column(sa.Integer, default=0)


class PaperCostDB(Base):
    __tablename__ = "paper_costs"
    id:             Mapped[int]             = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    paper:          Mapped[str]             = mapped_column(sa.String, sa.ForeignKey("papers.code"), nullable=False)
    weight:         Mapped[int]             = mapped_column(sa.Integer, nullable=False)
    base_sheet:     Mapped[str]             = mapped_column(sa.String, default="467x315")
    cost_per_sheet: Mapped[float]           = mapped_column(sa.Float, nullable=False)
    margin_rate:    Mapped[float]           = mapped_column(sa.Float, default=1.0)
    thickness:      Mapped[Optional[float]] = mapped_column(sa.Float, nullable=True)


class SizeDB(Base):
    __tablename__ = "sizes"
    code:       Mapped[str] = mapped_column(sa.String, primary_key=True)
    name:       Mapped[str] = mapped_column(sa.String, nullable=False)
    width:      Mapped[int] = mapped_column(sa.Integer, nullable=False)
    height:     Mapped[int] = mapped_column(sa.Integer, nullable=False)
    base_sheet: Mapped[str] = mapped_column(sa.String, default="467x315")
    up_count:   Mapped[int] = mapped_column(sa.Integer, default=1)


class PrintCostDB(Base):
    __tablename__ = "print_costs"
    id:            Mapped[int]           = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    min_faces:     Mapped[int]           = mapped_column(sa.Integer, nullable=False)
    max_faces:     Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    cost_per_face: Mapped[int]           = mapped_column(sa.Integer, nullable=False)


class FinishingCostDB(Base):
    __tablename__ = "finishing_costs"
    id:                Mapped[int]           = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    code:              Mapped[str]           = mapped_column(sa.String, nullable=False, index=True)
    min_qty:           Mapped[int]           = mapped_column(sa.Integer, default=1)
    max_qty:           Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    setup_cost:        Mapped[int]           = mapped_column(sa.Integer, default=0)
    setup_cost_double: Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    cost_per_unit:     Mapped[float]         = mapped_column(sa.Float, default=0)
    unit_type:         Mapped[str]           = mapped_column(sa.String, default="sheet")
    lines:             Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    coating_type:      Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    min_weight:        Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    max_weight:        Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)


class BindingCostDB(Base):
    __tablename__ = "binding_costs"
    id:            Mapped[int]           = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    code:          Mapped[str]           = mapped_column(sa.String, nullable=False, index=True)
    min_qty:       Mapped[int]           = mapped_column(sa.Integer, default=1)
    max_qty:       Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    setup_cost:    Mapped[int]           = mapped_column(sa.Integer, default=0)
    cost_per_copy: Mapped[int]           = mapped_column(sa.Integer, default=0)


# ── PYDANTIC SCHEMAS ────────────────────────────────────────────────────

class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductInput(_ApiModel):
    name:         str
    product_type: str                  = "flyer"
    schema_:      Dict[str, Any]       = Field(default_factory=dict, alias="schema")
    addons:       List[Dict[str, Any]] = Field(default_factory=list)
    active:       bool                 = True
    sort_order:   int                  = 0


class PriceRequest(_ApiModel):
    """Corps de POST /api/calculate-price (camelCase, format du configurateur)."""
    product_id:      Optional[int]            = None
    schema_:         Optional[Dict[str, Any]] = Field(default=None, alias="schema")
    product_type:    Optional[str]            = None
    customer:        Dict[str, Any]           = Field(default_factory=dict)
    qty:             Optional[int]            = None
    all_qtys:        List[int]                = Field(default_factory=list)
    addon_options:   List[Dict[str, Any]]     = Field(default_factory=list)
    selected_addons: List[str]                = Field(default_factory=list)


class OptionToggleInput(_ApiModel):
    block_id: str
    code:     Any
    enabled:  bool          = True
    group:    Optional[str] = None
    weight:   Optional[int] = None


class DefaultInput(_ApiModel):
    block_id: str
    value:    Any
    group:    Optional[str] = None


class BlockAddInput(_ApiModel):
    type:  str
    label: str = ""
