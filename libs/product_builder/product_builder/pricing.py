"""
Price Calculator — sélection validée + quantité → {unitPrice, total}.

Étapes :
  1. coût de base      : format × papier/grammage × couleur/faces (grilles du catalogue)
  2. pages intérieures : produits reliés, papier / impression des blocs liés × pages ajustées
  3. finitions         : coating, oshi, pli, coins arrondis, perforation, mising
  4. paliers quantité  : quantités proposées ; une quantité libre (allowCustom) rejoue la
                         même formule, sans interpolation ; sinon palier inférieur.
                         Prix unitaire ajusté pour que le total ne baisse jamais
                         quand la quantité augmente (voir _Ladder)
  5. livraison         : prix unitaire × (1 + pourcentage / 100)
  6. total             : prix unitaire × quantité, au won (arrondi demi-supérieur)

Chaque montant intermédiaire est un entier arrondi avant l'étape suivante.
Une sélection invalide ou un lien non résolu lève UnresolvedConfiguration :
jamais de prix partiel.
"""
import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field

from .blocks import DELIVERY_DAYS, DeliveryBlock, QuantityBlock
from .blocks.base import CamelModel
from .business_days import business_date, format_business_date
from .catalog import OptionCatalog
from .errors import ErrorKind, UnresolvedConfiguration, ValidationIssue
from .money import apply_percent, div, mul, round_to_unit, with_vat
from .resolver import Resolution, resolve
from .schema import BlockSchema
from .selection import Selection

log = logging.getLogger(__name__)

SINGLE_LAYER_TYPES = ("flyer", "leaflet", "postcard")
CORNER_BATCH_SIZE  = 100
VAT_RATE           = 10


class AddonOption(CamelModel):
    option_id: str
    name: str = ""
    price: int = 0
    enabled: bool = True


def addon_total(options: Iterable[AddonOption], selected: Iterable[str]) -> int:
    """Options forfaitaires ajoutées au total de la commande (pas au prix unitaire)."""
    selected = set(selected or [])
    return sum(o.price for o in options or [] if o.option_id in selected and o.enabled)


class PriceLine(CamelModel):
    """Résultat brut de la formule pour une quantité (avant livraison)."""
    qty: int
    subtotal: int = 0
    breakdown: Dict[str, int] = Field(default_factory=dict)
    sheets: int = 0
    faces: int = 0
    inner_sheets: int = 0
    inner_faces: int = 0
    estimated_weight: float = 0

    def add(self, key: str, amount: int) -> None:
        self.breakdown[key] = amount
        self.subtotal += amount


class PriceQuote(CamelModel):
    qty: int
    unit_price: int
    total: int
    base_unit_price: int
    subtotal: int
    delivery_percent: float = 0
    priced_qty: int
    pricing: str                     # preset | custom | tier | formula
    capped: bool = False             # prix unitaire ajusté pour garder des totaux croissants
    breakdown: Dict[str, int] = Field(default_factory=dict)
    sheets: int = 0
    faces: int = 0
    inner_sheets: int = 0
    inner_faces: int = 0
    inner_pages: Optional[int] = None
    thickness: Optional[float] = None
    estimated_weight: float = 0
    addon_total: int = 0
    grand_total: int = 0
    total_with_vat: int = 0
    contact_required: bool = False
    contact_message: Optional[str] = None
    delivery_date: Optional[str] = None


def _missing(message: str) -> UnresolvedConfiguration:
    return UnresolvedConfiguration(message, [
        ValidationIssue(kind=ErrorKind.UNRESOLVED_CONFIGURATION, message=message),
    ])


# ── Formules ────────────────────────────────────────────────────────────────

class _Formula:
    """Coût brut d'une sélection résolue pour une quantité donnée."""

    def __init__(self, catalog: OptionCatalog, schema: BlockSchema, res: Resolution):
        self.catalog = catalog
        self.schema = schema
        self.res = res
        self.sel: Selection = res.selection

    def at(self, qty: int) -> PriceLine:
        kind = self.schema.product_type
        if kind == "outsourced":
            return self._outsourced(qty)
        if self.res.binding is not None:
            return self._binding(qty, self.res.binding)
        if kind in SINGLE_LAYER_TYPES or self.schema.pages_block() is None:
            return self._single_layer(qty)
        raise _missing(f"Type de produit inconnu : {kind}")

    # ── helpers ─────────────────────────────────────────────────────────────

    def _size(self):
        info = self.catalog.size(self.sel.size) if self.sel.size else None
        if info is None:
            raise _missing(f"Format introuvable : {self.sel.size}")
        return info

    def _paper(self, paper: Optional[str], weight: Optional[int], base_sheet: str, sheets: int) -> int:
        pc = self.catalog.paper_cost(paper, weight, base_sheet) if paper and weight else None
        if pc is None:
            raise _missing(f"Tarif papier introuvable : {paper} {weight}g ({base_sheet})")
        return mul(pc.cost_per_sheet, pc.margin_rate, sheets)

    def _finishing(self, code: str, qty: int, **kw) -> int:
        cost = self.catalog.finishing_cost(code, qty, **kw)
        if cost is None:
            raise _missing(f"Grille de finition introuvable : {code} ({qty})")
        return cost

    def _coating(self, line: PriceLine, key: str, sheets: int) -> None:
        f = self.sel.finishing
        if not f.coating:
            return
        double = f.coating_side == "double"
        faces = sheets * (2 if double else 1)
        line.add(key, self._finishing(
            "coating", faces, double=double,
            coating_type=f.coating_type, weight=self.res.governing_weight,
        ))

    def _common_finishing(self, line: PriceLine, qty: int) -> None:
        f = self.sel.finishing
        if f.crease_count:
            line.add("osi", self._finishing("creasing", qty, lines=f.crease_count))
        if f.fold_count:
            line.add("fold", self._finishing("folding", qty, lines=f.fold_count))
        if f.corner:
            line.add("corner", self._finishing(
                "corner_rounding", qty, units=lambda q: math.ceil(q / CORNER_BATCH_SIZE)))
        if f.punch:
            holes = self.sel.punch_holes
            line.add("punch", self._finishing("punching", qty, units=lambda q: q * holes))
        if f.mising:
            line.add("mising", self._finishing("perforating", qty))

    # ── produits feuille : flyer, leaflet, postcard ─────────────────────────

    def _single_layer(self, qty: int) -> PriceLine:
        sel = self.sel
        size = self._size()
        line = PriceLine(qty=qty)
        line.sheets = math.ceil(qty / size.up_count)
        line.faces = line.sheets * (1 if sel.side == "single" else 2)

        line.add("paper", self._paper(sel.paper, sel.weight, size.base_sheet, line.sheets))
        line.add("print", self.catalog.print_cost(line.faces, mono=sel.color == "mono"))
        if self.catalog.has_finishing("cutting"):
            line.add("cutting", self.catalog.cumulative_cost("cutting", qty))
        self._coating(line, "coating", line.sheets)
        self._common_finishing(line, qty)

        area = size.width * size.height / 1_000_000
        line.estimated_weight = round(area * (sel.weight or 0) * qty / 1000, 2)
        return line

    # ── produits reliés : saddle, perfect, spring ───────────────────────────

    def _binding(self, qty: int, binding: str) -> PriceLine:
        sel = self.sel
        size = self._size()
        line = PriceLine(qty=qty)
        cover_sheets = qty

        if binding != "spring":
            cover_faces = cover_sheets * 2
            line.add("coverPaper", self._paper(sel.cover_paper, sel.cover_weight, size.base_sheet, cover_sheets))
            line.add("coverPrint", self.catalog.print_cost(cover_faces, mono=sel.cover_color == "mono"))

        inner_pages = self.res.inner_pages or 0
        single = sel.inner_side == "single"
        if binding == "saddle":
            line.inner_sheets = math.ceil(inner_pages / 4) * qty
        else:
            line.inner_sheets = (inner_pages if single else math.ceil(inner_pages / 2)) * qty
        line.inner_faces = line.inner_sheets * (1 if single else 2)
        line.add("innerPaper", self._paper(sel.inner_paper, sel.inner_weight, size.base_sheet, line.inner_sheets))
        base_faces = math.ceil(line.inner_faces / size.up_count)
        line.add("innerPrint", self.catalog.print_cost(base_faces, mono=sel.inner_color == "mono"))

        cost = self.catalog.binding_cost(binding, qty)
        if cost is None:
            raise _missing(f"Grille de reliure introuvable : {binding} ({qty})")
        line.add("binding", cost)

        if binding == "spring":
            self._spring_extras(line, qty, size.base_sheet)

        self._coating(line, "coverCoating", cover_sheets)
        self._common_finishing(line, qty)

        line.sheets, line.faces = cover_sheets, cover_sheets * 2
        area = size.width * size.height / 1_000_000
        cover_kg = area * (sel.cover_weight or 0) * cover_sheets / 1000
        inner_kg = area * (sel.inner_weight or 0) * line.inner_sheets / 1000
        line.estimated_weight = round(cover_kg + inner_kg, 2)
        return line

    def _spring_extras(self, line: PriceLine, qty: int, base_sheet: str) -> None:
        sel = self.sel
        if sel.pp and sel.pp != "none":
            line.add("pp", self._finishing("pp_cover", qty))
        if sel.cover_print and sel.cover_print != "none":
            faces = qty * (2 if sel.cover_print == "front_back" else 1)
            line.add("springCoverPaper", self._paper(sel.cover_paper, sel.cover_weight, base_sheet, qty))
            line.add("springCoverPrint", self.catalog.print_cost(faces, mono=sel.cover_color == "mono"))
        # back déjà effacé par le résolveur en couverture recto-verso
        if sel.back and sel.back != "none":
            line.add("back", self._finishing("back_board", qty))

    # ── produits sous-traités ───────────────────────────────────────────────

    def _outsourced(self, qty: int) -> PriceLine:
        cfg = self.schema.outsourced
        if cfg is None:
            raise _missing("Configuration sous-traitance absente")
        pages = self.sel.pages or cfg.default_pages
        per_copy = pages * cfg.page_price + cfg.binding_fee
        line = PriceLine(qty=qty)
        line.add("outsourced", mul(per_copy, qty, (100 - cfg.discount(qty)) / 100))
        return line


# ── Échelle des quantités ───────────────────────────────────────────────────

def _priced(formula: _Formula, qty: int, percent: float) -> Tuple[int, PriceLine]:
    line = formula.at(qty)
    return apply_percent(div(line.subtotal, qty), percent), line


class _Ladder:
    """
    Prix unitaires retenus pour les quantités proposées (paliers + plage libre).

    Le total vaut toujours prix unitaire × quantité, et il ne baisse jamais
    d'une quantité proposée à la suivante :
      - jusqu'au dernier palier, le prix unitaire est plafonné au plus grand
        entier dont le total ne dépasse pas celui de la quantité proposée suivante
      - au-delà (plage libre), il est relevé au plus petit entier dont le total
        atteint celui de la quantité précédente
    Une quantité non proposée prend le prix du palier inférieur, plafonné par
    le total du palier supérieur.

    Les formules sont mémorisées : un tableau de quantités ne les évalue
    qu'une fois chacune.
    """

    def __init__(self, formula: _Formula, percent: float, presets: List[int], cfg):
        self.formula = formula
        self.percent = percent
        self.presets = presets
        self.preset_set = set(presets)
        self.custom = cfg.allow_custom
        self.lo, self.hi = cfg.min, cfg.max
        self.top = presets[-1]
        self._raw: Dict[int, Tuple[int, PriceLine]] = {}
        self._unit: Dict[int, int] = {}

    def raw(self, qty: int) -> Tuple[int, PriceLine]:
        if qty not in self._raw:
            self._raw[qty] = _priced(self.formula, qty, self.percent)
        return self._raw[qty]

    def offered(self, qty: int) -> bool:
        return qty in self.preset_set or (self.custom and self.lo <= qty <= self.hi)

    def _next(self, qty: int) -> Optional[int]:
        found = [p for p in self.presets if p > qty]
        if self.custom:
            c = max(qty + 1, self.lo)
            if c <= self.hi:
                found.append(c)
        return min(found, default=None)

    def _prev(self, qty: int) -> Optional[int]:
        found = [p for p in self.presets if p < qty]
        if self.custom:
            c = min(qty - 1, self.hi)
            if c >= self.lo:
                found.append(c)
        return max(found, default=None)

    def unit(self, qty: int) -> int:
        """Prix unitaire retenu pour une quantité proposée."""
        if qty in self._unit:
            return self._unit[qty]
        if qty == self.top:
            self._unit[qty] = self.raw(qty)[0]
            return self._unit[qty]

        # remonte (ou descend) jusqu'au dernier palier ou une quantité déjà calculée
        upward = qty < self.top
        step = self._next if upward else self._prev
        chain = [qty]
        anchor = step(qty)
        while anchor != self.top and anchor not in self._unit:
            chain.append(anchor)
            anchor = step(anchor)
        bound = self.unit(anchor) * anchor

        for q in reversed(chain):
            raw_unit = self.raw(q)[0]
            unit = min(raw_unit, bound // q) if upward else max(raw_unit, -(-bound // q))
            self._unit[q] = unit
            bound = unit * q
        return self._unit[qty]

    def quote(self, qty: int) -> Tuple[int, int, PriceLine, str]:
        """(prix unitaire, prix unitaire brut, ligne de formule, mode)"""
        if self.offered(qty):
            raw_unit, line = self.raw(qty)
            mode = "preset" if qty in self.preset_set else "custom"
            return self.unit(qty), raw_unit, line, mode

        lower = max((p for p in self.presets if p <= qty), default=None)
        if lower is None:
            raise _missing(f"Quantité minimale : {self.presets[0]} (demandé : {qty})")
        upper = min((p for p in self.presets if p > qty), default=None)
        raw_unit, line = self.raw(lower)
        unit = self.unit(lower)
        if upper is not None:
            unit = min(unit, self.unit(upper) * upper // qty)
        return unit, raw_unit, line, "tier"


# ── Calculateur ─────────────────────────────────────────────────────────────

class PriceCalculator:
    def __init__(self, catalog: OptionCatalog, vat_rate: float = VAT_RATE):
        self.catalog = catalog
        self.vat_rate = vat_rate

    def resolve(self, schema: BlockSchema, selection: Selection) -> Resolution:
        res = resolve(schema, selection, self.catalog)
        if not res.valid:
            log.warning("Calcul refusé (%s) : %s", schema.product_type,
                        "; ".join(e.message for e in res.errors))
            res.raise_for_errors()
        return res

    def quote(
        self,
        schema: BlockSchema,
        selection: Selection,
        qty: Optional[int] = None,
        addons: int = 0,
        now: Optional[datetime] = None,
    ) -> PriceQuote:
        res = self.resolve(schema, selection)
        return self._quote(schema, res, selection.qty if qty is None else qty, addons, now)

    def quote_many(
        self,
        schema: BlockSchema,
        selection: Selection,
        qtys: Iterable[int],
        addons: int = 0,
        now: Optional[datetime] = None,
    ) -> Dict[int, Optional[PriceQuote]]:
        """
        Tableau des quantités — une seule résolution pour toutes les lignes.

        Une quantité impossible à chiffrer (sous le premier palier, grille
        absente) vaut None sans faire échouer les autres lignes.
        """
        res = self.resolve(schema, selection)
        ctx = self._context(schema, res)
        table: Dict[int, Optional[PriceQuote]] = {}
        for q in qtys:
            try:
                table[q] = self._quote(schema, res, q, addons, now, ctx)
            except UnresolvedConfiguration as e:
                log.info("Quantité %d non chiffrable (%s) : %s", q, schema.product_type, e)
                table[q] = None
        return table

    # ── interne ─────────────────────────────────────────────────────────────

    def _context(self, schema: BlockSchema, res: Resolution) -> Tuple[_Formula, float, Optional[_Ladder]]:
        formula = _Formula(self.catalog, schema, res)
        delivery = schema.first(DeliveryBlock)
        percent = delivery.config.percent(res.selection.delivery) if delivery else 0
        qblock = schema.first(QuantityBlock)
        presets = sorted(set(qblock.config.options)) if qblock else []
        ladder = _Ladder(formula, percent, presets, qblock.config) if presets else None
        return formula, percent, ladder

    def _quote(self, schema: BlockSchema, res: Resolution, qty: int, addons: int,
               now: Optional[datetime], ctx: Optional[tuple] = None) -> PriceQuote:
        if qty < 1:
            raise _missing(f"Quantité invalide : {qty}")
        sel = res.selection
        formula, percent, ladder = ctx or self._context(schema, res)
        qblock = schema.first(QuantityBlock)

        if ladder is None:
            unit, line = _priced(formula, qty, percent)
            quote = self._build(qty, unit, unit, line, "formula", percent)
        else:
            unit, raw_unit, line, mode = ladder.quote(qty)
            quote = self._build(qty, unit, raw_unit, line, mode, percent)

        quote.inner_pages = res.inner_pages
        quote.thickness = res.thickness
        quote.addon_total = addons
        quote.grand_total = quote.total + addons
        quote.total_with_vat = with_vat(quote.grand_total, self.vat_rate)
        if qblock is not None:
            cfg = qblock.config
            if cfg.round_enabled:
                quote.total_with_vat = round_to_unit(quote.total_with_vat, cfg.round_unit, cfg.round_method)
            if cfg.contact_required(qty):
                quote.contact_required = True
                quote.contact_message = cfg.contact_message or None
        if now is not None and sel.delivery in DELIVERY_DAYS:
            quote.delivery_date = format_business_date(business_date(DELIVERY_DAYS[sel.delivery], now))
        return quote

    @staticmethod
    def _build(qty: int, unit: int, raw_unit: int, line: PriceLine, mode: str, percent: float) -> PriceQuote:
        base_unit = div(line.subtotal, line.qty)
        breakdown = dict(line.breakdown)
        if percent:
            breakdown["delivery"] = (raw_unit - base_unit) * qty
        return PriceQuote(
            qty=qty,
            unit_price=unit,
            total=unit * qty,
            base_unit_price=base_unit,
            subtotal=line.subtotal,
            delivery_percent=percent,
            priced_qty=line.qty,
            pricing=mode,
            capped=unit != raw_unit,
            breakdown=breakdown,
            sheets=line.sheets,
            faces=line.faces,
            inner_sheets=line.inner_sheets,
            inner_faces=line.inner_faces,
            estimated_weight=line.estimated_weight,
        )
