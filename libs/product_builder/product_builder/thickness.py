"""
Épaisseur de reliure — estimation du dos et contrôle de la limite par type de reliure.

L'épaisseur mesurée (paper_costs.thickness) prime ; à défaut on estime
grammage × coefficient du papier (mm/g).
"""
from typing import Optional

from .catalog import OptionCatalog

THICKNESS_FACTORS = {
    "art":        0.0009,
    "snow":       0.0009,
    "mojo":       0.00115,
    "inspirer":   0.0012,
    "rendezvous": 0.0012,
    "matte":      0.0009,
    "ivory":      0.001,
    "kraft":      0.0012,
}
DEFAULT_FACTOR = 0.001

DEFAULT_LIMITS = {"saddle": 2.5, "perfect": 50.0, "spring": 20.0}
BINDING_NAMES  = {"saddle": "중철제본", "perfect": "무선제본", "spring": "스프링제본"}


def sheet_thickness(weight: Optional[int], paper: Optional[str] = None,
                    catalog: Optional[OptionCatalog] = None) -> float:
    """Épaisseur d'une feuille en mm."""
    if not weight:
        return 0.0
    if catalog is not None and paper:
        measured = catalog.paper_thickness(paper, weight)
        if measured:
            return measured
    code = (paper or "").lower()
    factor = next((f for key, f in THICKNESS_FACTORS.items() if key in code), DEFAULT_FACTOR)
    return weight * factor


def binding_thickness(
    binding: str,
    inner_pages: int,
    inner_weight: Optional[int],
    inner_paper: Optional[str] = None,
    cover_weight: Optional[int] = None,
    cover_paper: Optional[str] = None,
    inner_side: Optional[str] = "double",
    catalog: Optional[OptionCatalog] = None,
) -> float:
    """
    Épaisseur totale du livre (mm).
    - saddle  : cahier intérieur seul (la couverture pliée est négligée)
    - perfect : intérieur + 1 couverture
    - spring  : intérieur + 2 couvertures (avant / arrière séparées)
    """
    sheets = inner_pages if inner_side == "single" else inner_pages / 2
    inner = sheets * sheet_thickness(inner_weight, inner_paper, catalog)
    cover = sheet_thickness(cover_weight, cover_paper, catalog)
    if binding == "perfect":
        return inner + cover
    if binding == "spring":
        return inner + cover * 2
    return inner


def thickness_limit(binding: str, custom: Optional[float] = None) -> Optional[float]:
    return custom or DEFAULT_LIMITS.get(binding)


def thickness_error(binding: str, thickness: float, custom: Optional[float] = None) -> Optional[str]:
    """Message d'erreur si la limite est dépassée, sinon None."""
    limit = thickness_limit(binding, custom)
    if limit is None or thickness <= limit:
        return None
    name = BINDING_NAMES.get(binding, "제본")
    return f"{name} 두께 {limit:g}mm 초과 (현재 : {thickness:.1f}mm)"
