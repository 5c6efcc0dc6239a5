"""
Option Catalog — données de référence (papiers, grammages, formats, grilles de coûts).

Le catalogue est en lecture seule pendant un calcul de prix. Il est chargé depuis la DB
par l'application (src/database.py) ou construit via default_catalog() pour les tests
et le seed initial.

Codes de finition reconnus :
  cutting, coating, creasing (오시), folding, corner_rounding, punching,
  perforating (미싱), pp_cover, back_board
"""
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .money import Number, won

DEFAULT_BASE_SHEET    = "467x315"
DEFAULT_PRINT_PER_FACE = 85      # tarif plancher si aucune tranche ne couvre le volume
MONO_DISCOUNT_RATE    = 0.45     # noir & blanc = 45 % du tarif couleur


class _CatalogModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Paper(_CatalogModel):
    code: str
    name: str
    desc: str = ""
    sort_order: int = 0


class PaperCost(_CatalogModel):
    paper: str
    weight: int
    base_sheet: str = DEFAULT_BASE_SHEET
    cost_per_sheet: float
    margin_rate: float = 1.0
    thickness: Optional[float] = None      # mm, mesuré — sinon estimation par coefficient


class SizeInfo(_CatalogModel):
    code: str
    name: str
    width: int                              # mm
    height: int
    base_sheet: str = DEFAULT_BASE_SHEET
    up_count: int = 1                       # poses par feuille (multiplicateur de format)


class PrintCostTier(_CatalogModel):
    min_faces: int
    max_faces: Optional[int] = None
    cost_per_face: int


class CostBand(_CatalogModel):
    """Tranche de coût de finition : setup + coût unitaire, par plage de quantité."""
    code: str
    min_qty: int = 1
    max_qty: Optional[int] = None
    setup_cost: int = 0
    setup_cost_double: Optional[int] = None
    cost_per_unit: float = 0
    unit_type: str = "sheet"
    lines: Optional[int] = None             # creasing : nb de lignes / folding : nb de volets
    coating_type: Optional[str] = None      # matte | gloss
    min_weight: Optional[int] = None        # bande de grammage (coating)
    max_weight: Optional[int] = None


class BindingCost(_CatalogModel):
    code: str                               # saddle | perfect | spring
    min_qty: int = 1
    max_qty: Optional[int] = None
    setup_cost: int = 0
    cost_per_copy: int = 0


def _covers(band_max: Optional[int], qty: int) -> bool:
    return band_max is None or qty <= band_max


class OptionCatalog(_CatalogModel):
    papers: List[Paper] = Field(default_factory=list)
    paper_costs: List[PaperCost] = Field(default_factory=list)
    sizes: List[SizeInfo] = Field(default_factory=list)
    print_costs: List[PrintCostTier] = Field(default_factory=list)
    finishing_costs: List[CostBand] = Field(default_factory=list)
    binding_costs: List[BindingCost] = Field(default_factory=list)

    # ── Papiers ─────────────────────────────────────────────────────────────

    def paper(self, code: str) -> Optional[Paper]:
        return next((p for p in self.papers if p.code == code), None)

    def paper_weights(self, code: str, base_sheet: Optional[str] = None) -> List[int]:
        """Grammages disponibles pour un papier (tous formats si base_sheet=None)."""
        return sorted({
            pc.weight for pc in self.paper_costs
            if pc.paper == code and (base_sheet is None or pc.base_sheet == base_sheet)
        })

    def weights_map(self) -> Dict[str, List[int]]:
        return {p.code: self.paper_weights(p.code) for p in self.papers}

    def paper_cost(self, code: str, weight: int, base_sheet: str = DEFAULT_BASE_SHEET) -> Optional[PaperCost]:
        return next(
            (pc for pc in self.paper_costs
             if pc.paper == code and pc.weight == weight and pc.base_sheet == base_sheet),
            None,
        )

    def paper_thickness(self, code: str, weight: int) -> Optional[float]:
        pc = next((pc for pc in self.paper_costs
                   if pc.paper == code and pc.weight == weight and pc.thickness), None)
        return pc.thickness if pc else None

    # ── Formats ─────────────────────────────────────────────────────────────

    def size(self, code: str) -> Optional[SizeInfo]:
        return next((s for s in self.sizes if s.code == code), None)

    def size_multipliers(self) -> Dict[str, int]:
        return {s.code: s.up_count for s in self.sizes}

    # ── Impression ──────────────────────────────────────────────────────────

    def print_cost(self, faces: int, mono: bool = False) -> int:
        """
        Coût total d'impression pour `faces` faces.

        Les tranches sont dégressives : on retient le meilleur prix entre la tranche
        courante et les tranches supérieures facturées à leur minimum, si bien qu'un
        volume plus grand ne coûte jamais moins cher qu'un volume plus petit.
        """
        if faces <= 0:
            return 0
        candidates = [t for t in self.print_costs if _covers(t.max_faces, faces)]
        if not candidates:
            return self._face_rate(DEFAULT_PRINT_PER_FACE, mono) * faces
        return min(
            self._face_rate(t.cost_per_face, mono) * max(faces, t.min_faces)
            for t in candidates
        )

    @staticmethod
    def _face_rate(rate: int, mono: bool) -> int:
        return won(rate * MONO_DISCOUNT_RATE) if mono else rate

    # ── Finitions / reliure ─────────────────────────────────────────────────

    def has_finishing(self, code: str) -> bool:
        return any(b.code == code for b in self.finishing_costs)

    def finishing_bands(
        self,
        code: str,
        lines: Optional[int] = None,
        coating_type: Optional[str] = None,
        weight: Optional[int] = None,
    ) -> List[CostBand]:
        bands = []
        for b in self.finishing_costs:
            if b.code != code:
                continue
            if lines is not None and b.lines is not None and b.lines != lines:
                continue
            if coating_type and b.coating_type and b.coating_type != coating_type:
                continue
            if weight is not None and b.min_weight is not None and weight < b.min_weight:
                continue
            if weight is not None and b.max_weight is not None and weight > b.max_weight:
                continue
            bands.append(b)
        return sorted(bands, key=lambda b: b.min_qty)

    def finishing_cost(
        self,
        code: str,
        qty: int,
        units: Callable[[int], Number] = lambda q: q,
        double: bool = False,
        **match,
    ) -> Optional[int]:
        """
        setup + coût unitaire × units(qty) sur la tranche applicable.
        Même règle de meilleur prix que print_cost. None si aucune tranche ne couvre qty.
        """
        bands = [b for b in self.finishing_bands(code, **match) if _covers(b.max_qty, qty)]
        if not bands:
            return None

        def _at(b: CostBand) -> int:
            setup = b.setup_cost_double if (double and b.setup_cost_double) else b.setup_cost
            return setup + won(b.cost_per_unit * units(max(qty, b.min_qty)))

        return min(_at(b) for b in bands)

    def cumulative_cost(self, code: str, qty: int) -> int:
        """
        Coût marginal par tranches (재단) : chaque tranche ne s'applique qu'à sa portion.
        1~50 : 100 / 51~100 : 12  →  80 ex. = 50×100 + 30×12
        """
        bands = self.finishing_bands(code)
        if not bands:
            return 0
        total, remaining = bands[0].setup_cost, qty
        for b in bands:
            if remaining <= 0:
                break
            size = (b.max_qty - b.min_qty + 1) if b.max_qty is not None else remaining
            taken = min(remaining, size)
            total += won(taken * b.cost_per_unit)
            remaining -= taken
        return total

    def binding_cost(self, code: str, qty: int) -> Optional[int]:
        bands = [b for b in self.binding_costs if b.code == code and _covers(b.max_qty, qty)]
        if not bands:
            return None
        return min(b.setup_cost + b.cost_per_copy * max(qty, b.min_qty) for b in bands)


# ── Seed par défaut ─────────────────────────────────────────────────────────

_PAPERS = [
    {"code": "snow",     "name": "스노우지", "desc": "Couché brillant",   "sort_order": 1},
    {"code": "mojo",     "name": "모조지",   "desc": "Offset standard",   "sort_order": 2},
    {"code": "inspirer", "name": "인스퍼",   "desc": "Premium mat",       "sort_order": 3},
    {"code": "art",      "name": "아트지",   "desc": "Couché satiné",     "sort_order": 4},
]

_PAPER_COSTS = {
    "snow":     {100: 23, 120: 28, 150: 35, 180: 42, 200: 47, 250: 58, 300: 70},
    "mojo":     {80: 19, 100: 22, 120: 26, 150: 35, 180: 42},
    "inspirer": {105: 44, 130: 58, 160: 71, 190: 84, 240: 98},
    "art":      {100: 24, 120: 29, 150: 36, 180: 43, 200: 48},
}

_SIZES = [
    {"code": "a3",       "name": "A3", "width": 297, "height": 420, "up_count": 1},
    {"code": "a4",       "name": "A4", "width": 210, "height": 297, "up_count": 2},
    {"code": "b5",       "name": "B5", "width": 182, "height": 257, "up_count": 2},
    {"code": "a5",       "name": "A5", "width": 148, "height": 210, "up_count": 4},
    {"code": "postcard", "name": "엽서", "width": 100, "height": 148, "up_count": 8},
]

_PRINT_TIERS = [
    (1, 1, 500), (2, 2, 480), (3, 5, 440), (6, 10, 400), (11, 20, 350), (21, 30, 300),
    (31, 50, 260), (51, 80, 240), (81, 100, 220), (101, 200, 200), (201, 500, 185),
    (501, 750, 178), (751, 1000, 172), (1001, 1500, 163), (1501, 2000, 152),
    (2001, 3000, 142), (3001, 4000, 128), (4001, 5500, 120), (5501, 7000, 114),
    (7001, 9000, 106), (9001, 12000, 98), (12001, 15000, 92), (15001, 20000, 88),
    (20001, None, 85),
]

_FINISHING = [
    # 재단 — tranches cumulatives
    {"code": "cutting", "min_qty": 1,   "max_qty": 500,  "setup_cost": 3000, "cost_per_unit": 2},
    {"code": "cutting", "min_qty": 501, "max_qty": None, "setup_cost": 3000, "cost_per_unit": 1},
    # 코팅 — par face, setup double pour le recto-verso
    {"code": "coating", "min_qty": 1,   "max_qty": 500,  "setup_cost": 5000, "setup_cost_double": 7000,
     "cost_per_unit": 15, "coating_type": "matte"},
    {"code": "coating", "min_qty": 501, "max_qty": None, "setup_cost": 5000, "setup_cost_double": 7000,
     "cost_per_unit": 10, "coating_type": "matte"},
    {"code": "coating", "min_qty": 1,   "max_qty": 500,  "setup_cost": 5000, "setup_cost_double": 7000,
     "cost_per_unit": 18, "coating_type": "gloss"},
    {"code": "coating", "min_qty": 501, "max_qty": None, "setup_cost": 5000, "setup_cost_double": 7000,
     "cost_per_unit": 12, "coating_type": "gloss"},
    # 오시 — par nombre de lignes
    {"code": "creasing", "lines": 1, "min_qty": 1,   "max_qty": 100,  "setup_cost": 2000, "cost_per_unit": 30},
    {"code": "creasing", "lines": 1, "min_qty": 101, "max_qty": None, "setup_cost": 2000, "cost_per_unit": 20},
    {"code": "creasing", "lines": 2, "min_qty": 1,   "max_qty": 100,  "setup_cost": 3000, "cost_per_unit": 30},
    {"code": "creasing", "lines": 2, "min_qty": 101, "max_qty": None, "setup_cost": 3000, "cost_per_unit": 20},
    {"code": "creasing", "lines": 3, "min_qty": 1,   "max_qty": 100,  "setup_cost": 4000, "cost_per_unit": 30},
    {"code": "creasing", "lines": 3, "min_qty": 101, "max_qty": None, "setup_cost": 4000, "cost_per_unit": 20},
    # 접지 — par nombre de volets
    {"code": "folding", "lines": 2, "min_qty": 1,   "max_qty": 100,  "setup_cost": 3000, "cost_per_unit": 40},
    {"code": "folding", "lines": 2, "min_qty": 101, "max_qty": None, "setup_cost": 3000, "cost_per_unit": 30},
    {"code": "folding", "lines": 3, "min_qty": 1,   "max_qty": 100,  "setup_cost": 4000, "cost_per_unit": 40},
    {"code": "folding", "lines": 3, "min_qty": 101, "max_qty": None, "setup_cost": 4000, "cost_per_unit": 30},
    {"code": "folding", "lines": 4, "min_qty": 1,   "max_qty": 100,  "setup_cost": 5000, "cost_per_unit": 40},
    {"code": "folding", "lines": 4, "min_qty": 101, "max_qty": None, "setup_cost": 5000, "cost_per_unit": 30},
    # 귀도리 — par lot de 100
    {"code": "corner_rounding", "setup_cost": 3000, "cost_per_unit": 1000, "unit_type": "batch"},
    # 타공 — par trou
    {"code": "punching", "setup_cost": 3000, "cost_per_unit": 5, "unit_type": "hole"},
    # 미싱
    {"code": "perforating", "setup_cost": 3000, "cost_per_unit": 20},
    # reliure spirale — couverture PP et dos carton
    {"code": "pp_cover",   "setup_cost": 0, "cost_per_unit": 200, "unit_type": "copy"},
    {"code": "back_board", "setup_cost": 0, "cost_per_unit": 150, "unit_type": "copy"},
]

_BINDING = [
    {"code": "saddle",  "min_qty": 1,   "max_qty": 100,  "setup_cost": 5000, "cost_per_copy": 300},
    {"code": "saddle",  "min_qty": 101, "max_qty": None, "setup_cost": 5000, "cost_per_copy": 200},
    {"code": "perfect", "min_qty": 1,   "max_qty": 100,  "setup_cost": 8000, "cost_per_copy": 1000},
    {"code": "perfect", "min_qty": 101, "max_qty": None, "setup_cost": 8000, "cost_per_copy": 800},
    {"code": "spring",  "min_qty": 1,   "max_qty": 100,  "setup_cost": 6000, "cost_per_copy": 1500},
    {"code": "spring",  "min_qty": 101, "max_qty": None, "setup_cost": 6000, "cost_per_copy": 1200},
]


def default_catalog() -> OptionCatalog:
    """Catalogue de référence (seed DB + tests)."""
    return OptionCatalog(
        papers=[Paper(**p) for p in _PAPERS],
        paper_costs=[
            PaperCost(paper=code, weight=w, cost_per_sheet=cost, margin_rate=1.2)
            for code, weights in _PAPER_COSTS.items()
            for w, cost in weights.items()
        ],
        sizes=[SizeInfo(**s) for s in _SIZES],
        print_costs=[PrintCostTier(min_faces=a, max_faces=b, cost_per_face=c) for a, b, c in _PRINT_TIERS],
        finishing_costs=[CostBand(**f) for f in _FINISHING],
        binding_costs=[BindingCost(**b) for b in _BINDING],
    )
