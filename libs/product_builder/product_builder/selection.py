"""
Selection — configuration en cours d'un client (enregistrement plat, camelCase en JSON).

Créée à partir des défauts du schéma (Selection.from_schema), modifiée à chaque
interaction, relue par le résolveur puis par le calcul de prix. Jamais persistée
en tant que telle : seule la ligne de commande en garde une copie.
"""
import logging
from typing import Optional

from .blocks import (
    BackBlock, CoverPrintBlock, DeliveryBlock, FinishingBlock, InnerLayerBlock, PagesBlock,
    PaperBlock, PPBlock, PrintBlock, QuantityBlock, SizeBlock, SpringColorBlock, SpringOptionsBlock,
)
from .blocks.base import CamelModel
from .schema import BlockSchema

log = logging.getLogger(__name__)

DEFAULT_PUNCH_HOLES = 2


class FinishingSelection(CamelModel):
    coating: bool = False
    coating_type: Optional[str] = None
    coating_side: Optional[str] = None
    corner: bool = False
    punch: bool = False
    mising: bool = False
    osi_enabled: bool = False
    osi: Optional[int] = None
    fold_enabled: bool = False
    fold: Optional[int] = None

    @property
    def fold_count(self) -> Optional[int]:
        return self.fold if self.fold_enabled and self.fold else None

    @property
    def crease_count(self) -> Optional[int]:
        return self.osi if self.osi_enabled and self.osi else None

    def is_empty(self) -> bool:
        return not (self.coating or self.corner or self.punch or self.mising
                    or self.fold_count or self.crease_count)


class Selection(CamelModel):
    size:         Optional[str] = None
    paper:        Optional[str] = None
    weight:       Optional[int] = None
    color:        Optional[str] = None
    side:         Optional[str] = None
    cover_paper:  Optional[str] = None
    cover_weight: Optional[int] = None
    cover_color:  Optional[str] = None
    inner_paper:  Optional[str] = None
    inner_weight: Optional[int] = None
    inner_color:  Optional[str] = None
    inner_side:   Optional[str] = None
    pp:           Optional[str] = None
    cover_print:  Optional[str] = None
    back:         Optional[str] = None
    spring_color: Optional[str] = None
    pages:        Optional[int] = None
    qty:          int = 1
    delivery:     Optional[str] = None
    punch_holes:  int = DEFAULT_PUNCH_HOLES
    finishing:    FinishingSelection = FinishingSelection()

    @classmethod
    def from_schema(cls, schema: BlockSchema) -> "Selection":
        """Sélection initiale : défaut de chaque bloc actif, routé selon son rôle."""
        sel = cls()
        for block in schema.active_blocks():
            cfg = block.config

            if isinstance(block, SizeBlock):
                sel.size = cfg.default

            elif isinstance(block, PaperBlock) and cfg.default:
                role = schema.paper_role(block.id)
                prefix = "" if role == "main" else f"{role}_"
                setattr(sel, f"{prefix}paper", cfg.default.paper)
                setattr(sel, f"{prefix}weight", cfg.default.weight)

            elif isinstance(block, PrintBlock) and cfg.default:
                role = schema.print_role(block.id)
                if role == "cover":
                    sel.cover_color = cfg.default.color
                elif role == "inner":
                    sel.inner_color, sel.inner_side = cfg.default.color, cfg.default.side
                else:
                    sel.color, sel.side = cfg.default.color, cfg.default.side

            elif isinstance(block, FinishingBlock):
                d = cfg.default
                sel.finishing = FinishingSelection(
                    coating=d.coating, coating_type=d.coating_type, coating_side=d.coating_side,
                    corner=d.corner, punch=d.punch, mising=d.mising,
                    osi_enabled=bool(d.osi), osi=d.osi,
                    fold_enabled=bool(d.fold), fold=d.fold,
                )

            elif isinstance(block, PPBlock):
                sel.pp = cfg.default
            elif isinstance(block, BackBlock):
                sel.back = cfg.default
            elif isinstance(block, SpringColorBlock):
                sel.spring_color = cfg.default

            elif isinstance(block, CoverPrintBlock):
                sel.cover_print = cfg.default
                if cfg.default_paper and sel.cover_paper is None:
                    sel.cover_paper, sel.cover_weight = cfg.default_paper.paper, cfg.default_paper.weight

            elif isinstance(block, SpringOptionsBlock):
                defaults = cfg.default_value()
                sel.pp           = defaults["pp"]
                sel.cover_print  = defaults["cover_print"]
                sel.back         = defaults["back"]
                sel.spring_color = defaults["spring_color"]
                dp = cfg.cover_print.default_paper
                if dp and sel.cover_paper is None:
                    sel.cover_paper, sel.cover_weight = dp.paper, dp.weight

            elif isinstance(block, PagesBlock):
                sel.pages = cfg.default

            elif isinstance(block, InnerLayerBlock):
                sel.pages = cfg.default_pages
                if cfg.default_paper:
                    sel.inner_paper, sel.inner_weight = cfg.default_paper.paper, cfg.default_paper.weight
                if cfg.default_print:
                    sel.inner_color, sel.inner_side = cfg.default_print.color, cfg.default_print.side

            elif isinstance(block, DeliveryBlock):
                sel.delivery = cfg.default

            elif isinstance(block, QuantityBlock) and cfg.default:
                sel.qty = cfg.default

        if sel.cover_print == "front_back":
            sel.back = None
        log.debug("Sélection initiale %s : %s", schema.product_type, sel.model_dump(exclude_none=True))
        return sel
