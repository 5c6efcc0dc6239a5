"""
Colisage et frais de port.

Base : feuille 467x315mm (A4 2 poses), cartons de 30cm, messagerie au-delà de 30kg/carton.
"""
import math
from typing import Optional

from pydantic import BaseModel

from .money import won

BOX_HEIGHT_MM     = 300
FREIGHT_KG        = 30
BASE_SHEET_AREA   = 0.147105     # m², 467x315
A4_AREA           = 0.06237      # m², 210x297
BOOK_MM_PER_PAGE  = 0.1


class Packaging(BaseModel):
    total_sheets: int = 0
    total_thickness: float = 0
    box_count: int = 1
    total_weight: float = 0          # kg
    weight_per_box: float = 0
    needs_freight: bool = False


class ShippingConfig(BaseModel):
    fee_per_box: int = 4000
    free_boxes: int = 1
    free_threshold: int = 50000


def _packed(total_weight: float, total_thickness: float, total_sheets: int = 0) -> Packaging:
    boxes = max(1, math.ceil(total_thickness / BOX_HEIGHT_MM))
    per_box = total_weight / boxes
    return Packaging(
        total_sheets=total_sheets,
        total_thickness=round(total_thickness, 1),
        box_count=boxes,
        total_weight=round(total_weight, 1),
        weight_per_box=round(per_box, 1),
        needs_freight=per_box > FREIGHT_KG,
    )


def sheet_packaging(quantity: int, paper_thickness: float, paper_weight: int,
                    double_sided: bool = True) -> Packaging:
    """Produit feuille : 2 exemplaires par feuille en recto-verso."""
    if not quantity or not paper_thickness or not paper_weight:
        return Packaging()
    sheets = math.ceil(quantity / (2 if double_sided else 1))
    weight = sheets * BASE_SHEET_AREA * paper_weight / 1000
    return _packed(weight, sheets * paper_thickness, sheets)


def binding_packaging(quantity: int, pages: int, inner_weight: Optional[int] = None,
                      cover_weight: Optional[int] = None) -> Packaging:
    """Produit relié : format A4, couverture recto + verso."""
    if not quantity or not pages:
        return Packaging()
    inner_sheets = math.ceil(pages / 2)
    inner = inner_sheets * quantity * A4_AREA * (inner_weight or 80) / 1000
    cover = quantity * A4_AREA * 2 * (cover_weight or 200) / 1000
    return _packed(inner + cover, pages * BOOK_MM_PER_PAGE * quantity)


def shipping_cost(box_count: int, product_price: int, config: Optional[ShippingConfig] = None) -> int:
    """Port par carton ; au-delà du seuil, `free_boxes` cartons offerts."""
    config = config or ShippingConfig()
    if box_count <= 0:
        return 0
    if product_price >= config.free_threshold:
        return won(max(0, box_count - config.free_boxes) * config.fee_per_box)
    return won(box_count * config.fee_per_box)
