"""
Resolver / Validator — règles inter-blocs évaluées à chaque changement de sélection.

resolve(schema, selection) ne dépend pas de l'ordre des saisies : les règles de
forçage (pli → oshi, couverture recto-verso → dos désactivé) sont des fonctions
pures de l'état courant.

Règles :
  1. source de couverture   : pp ≠ none ou coverPrint ≠ none          → MissingCoverSource
  2. dos auto-désactivé     : coverPrint == front_back → bloc back désactivé, valeur ignorée
  3. coating / grammage     : grammage directeur hors plage           → CoatingWeightIneligible
  4. pli → oshi             : pli n sur papier ≥ seuil → oshi activé, n − 1 lignes
  5. épaisseur de reliure   : dos estimé > limite                     → ThicknessExceeded
  6. pages intérieures      : saddle = total − 4, leaf = total
+ appartenance des valeurs au schéma (UnknownOption) et liens (UnresolvedConfiguration).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field

from .blocks import (
    BackBlock, CoverPrintBlock, DeliveryBlock, FinishingBlock, InnerLayerBlock, PagesBlock,
    PaperBlock, PPBlock, PrintBlock, SizeBlock, SpringColorBlock, SpringOptionsBlock,
    inner_page_count,
)
from .blocks.base import BaseBlock, CamelModel, PaperChoice, PrintChoice, paper_enabled
from .catalog import OptionCatalog
from .errors import ErrorKind, UnresolvedConfiguration, ValidationIssue
from .schema import BlockSchema
from .selection import Selection
from .thickness import binding_thickness, thickness_error

log = logging.getLogger(__name__)

NONE = "none"

# champ de sélection → (bloc dédié, groupe spring_options)
_SIMPLE_FIELDS = {
    "pp":           (PPBlock, "pp"),
    "cover_print":  (CoverPrintBlock, "cover_print"),
    "back":         (BackBlock, "back"),
    "spring_color": (SpringColorBlock, "spring_color"),
}


class Resolution(CamelModel):
    selection: Selection
    disabled_blocks: List[str] = Field(default_factory=list)
    disabled_options: Dict[str, List[str]] = Field(default_factory=dict)
    errors: List[ValidationIssue] = Field(default_factory=list)
    binding: Optional[str] = None
    inner_pages: Optional[int] = None
    governing_weight: Optional[int] = None
    thickness: Optional[float] = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise UnresolvedConfiguration(
                f"Configuration invalide : {self.errors[0].message}", self.errors,
            )


def resolve(schema: BlockSchema, selection: Selection,
            catalog: Optional[OptionCatalog] = None) -> Resolution:
    return Resolver(schema, catalog).resolve(selection)


def governing_weight(schema: BlockSchema, sel: Selection) -> Optional[int]:
    """
    Grammage directeur du coating : papier lié explicitement au bloc finition,
    sinon premier grammage non nul parmi couverture, principal, intérieur.
    """
    fin = schema.finishing_block()
    linked = fin.config.coating.linked_paper if fin else None
    if linked:
        block = schema.get(linked)
        if isinstance(block, InnerLayerBlock):
            return sel.inner_weight
        if isinstance(block, PaperBlock):
            role = schema.paper_role(block.id)
            return {"main": sel.weight, "cover": sel.cover_weight, "inner": sel.inner_weight}[role]
    return next((w for w in (sel.cover_weight, sel.weight, sel.inner_weight) if w is not None), None)


class Resolver:
    def __init__(self, schema: BlockSchema, catalog: Optional[OptionCatalog] = None):
        self.schema = schema
        self.catalog = catalog

    # ── Sources d'options ───────────────────────────────────────────────────

    def _spring(self) -> Optional[SpringOptionsBlock]:
        return self.schema.first(SpringOptionsBlock)

    def _simple_source(self, field: str) -> Tuple[Optional[BaseBlock], Optional[str]]:
        """Bloc (et groupe éventuel) qui propose les valeurs du champ."""
        cls, group = _SIMPLE_FIELDS[field]
        block = self.schema.first(cls)
        if block is not None:
            return block, None
        spring = self._spring()
        if spring is not None and spring.config.group(group).enabled:
            return spring, group
        return None, None

    def _paper_source(self, role: str) -> Tuple[Optional[BaseBlock], Optional[str]]:
        for block in self.schema.active_blocks():
            if isinstance(block, PaperBlock) and self.schema.paper_role(block.id) == role:
                return block, None
            if role == "inner" and isinstance(block, InnerLayerBlock):
                return block, "paper"
        if role == "cover":
            block = self.schema.first(CoverPrintBlock)
            if block is not None:
                return block, "paper"
            spring = self._spring()
            if spring is not None and spring.config.cover_print.enabled:
                return spring, "paper"
        return None, None

    def _print_source(self, role: str) -> Tuple[Optional[BaseBlock], Optional[str]]:
        for block in self.schema.active_blocks():
            if isinstance(block, PrintBlock) and self.schema.print_role(block.id) == role:
                return block, None
            if role == "inner" and isinstance(block, InnerLayerBlock):
                return block, "print"
        return None, None

    # ── Évaluation ──────────────────────────────────────────────────────────

    def resolve(self, selection: Selection) -> Resolution:
        sel = selection.model_copy(deep=True)
        res = Resolution(selection=sel, binding=self.schema.binding)
        fin = self.schema.finishing_block()

        self._normalize_cover(sel)
        self._disable_back(sel, res)
        res.governing_weight = governing_weight(self.schema, sel)
        forced_crease = self._force_crease(sel, res, fin)

        self._check_membership(sel, res, fin, forced_crease)
        self._check_cover_source(sel, res)
        self._check_coating(sel, res, fin)
        self._check_pages(sel, res)
        res.errors.extend(self.schema.link_issues())
        if sel.qty < 1:
            self._error(res, ErrorKind.UNRESOLVED_CONFIGURATION, f"Quantité invalide : {sel.qty}")

        res.disabled_blocks = sorted(set(res.disabled_blocks))
        if res.errors:
            log.debug("Sélection invalide (%s) : %s", self.schema.product_type,
                      [e.kind.value for e in res.errors])
        return res

    @staticmethod
    def _error(res: Resolution, kind: ErrorKind, message: str, block_id: Optional[str] = None) -> None:
        res.errors.append(ValidationIssue(kind=kind, message=message, affected_block_id=block_id))

    def _normalize_cover(self, sel: Selection) -> None:
        # papier de couverture porté par l'option d'impression : ignoré sans impression
        block, group = self._paper_source("cover")
        if group == "paper" and sel.cover_print in (None, NONE):
            sel.cover_paper = sel.cover_weight = None

    def _disable_back(self, sel: Selection, res: Resolution) -> None:
        if sel.cover_print != "front_back":
            return
        block, group = self._simple_source("back")
        if block is not None:
            res.disabled_blocks.append(block.id if group is None else f"{block.id}.back")
            log.debug("Couverture recto-verso : dos %s désactivé", block.id)
        sel.back = None

    def _force_crease(self, sel: Selection, res: Resolution, fin: Optional[FinishingBlock]) -> bool:
        folds = sel.finishing.fold_count
        weight = res.governing_weight
        if fin is None or not folds or weight is None:
            return False
        if weight < fin.config.crease_weight_threshold:
            return False
        sel.finishing.osi_enabled = True
        sel.finishing.osi = folds - 1
        res.disabled_options.setdefault(fin.id, []).append("osi")
        log.debug("Pli %d sur %dg : oshi forcé à %d ligne(s)", folds, weight, folds - 1)
        return True

    # ── Appartenance au schéma ──────────────────────────────────────────────

    def _check_value(self, res: Resolution, field: str, value: Any,
                     block: Optional[BaseBlock], group: Optional[str] = None,
                     required: bool = True) -> None:
        if block is None:
            if value is not None:
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"{field} : option {value!r} non proposée")
            return
        if value is None:
            if required and not block.optional:
                self._error(res, ErrorKind.UNRESOLVED_CONFIGURATION, f"{field} : valeur manquante", block.id)
            return
        if not block.config.accepts(value, group):
            self._error(res, ErrorKind.UNKNOWN_OPTION, f"{field} : option {_show(value)} non activée", block.id)
            return
        if block.locked and group is None:
            default = block.config.default_value()
            if default is not None and default != value and not isinstance(default, dict):
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"{field} : bloc verrouillé sur {_show(default)}", block.id)

    def _check_membership(self, sel: Selection, res: Resolution,
                          fin: Optional[FinishingBlock], forced_crease: bool) -> None:
        self._check_value(res, "size", sel.size, self.schema.first(SizeBlock))
        self._check_value(res, "delivery", sel.delivery, self.schema.first(DeliveryBlock))

        for field in _SIMPLE_FIELDS:
            if field == "back" and sel.cover_print == "front_back":
                continue
            block, group = self._simple_source(field)
            self._check_value(res, field, getattr(sel, field), block, group)

        for role, prefix in (("main", ""), ("cover", "cover_"), ("inner", "inner_")):
            paper, weight = getattr(sel, f"{prefix}paper"), getattr(sel, f"{prefix}weight")
            block, group = self._paper_source(role)
            value = None if paper is None and weight is None else {"paper": paper, "weight": weight}
            required = not (role == "cover" and group == "paper")
            self._check_paper(res, f"{prefix}paper", value, block, group, required)

        block, group = self._print_source("main")
        value = None if sel.color is None and sel.side is None else PrintChoice(
            color=sel.color or "", side=sel.side or "")
        self._check_value(res, "print", value, block, group)

        block, group = self._print_source("inner")
        value = None if sel.inner_color is None and sel.inner_side is None else PrintChoice(
            color=sel.inner_color or "", side=sel.inner_side or "")
        self._check_value(res, "inner_print", value, block, group)

        block, _ = self._print_source("cover")
        if block is None:
            self._check_value(res, "cover_color", sel.cover_color, None)
        elif sel.cover_color is not None and not getattr(block.config, sel.cover_color, False):
            self._error(res, ErrorKind.UNKNOWN_OPTION,
                        f"cover_color : option {sel.cover_color!r} non activée", block.id)

        self._check_finishing(sel, res, fin, forced_crease)

    def _check_paper(self, res: Resolution, field: str, value: Optional[dict],
                     block: Optional[BaseBlock], group: Optional[str], required: bool) -> None:
        if value is not None and (value["paper"] is None or value["weight"] is None):
            self._error(res, ErrorKind.UNRESOLVED_CONFIGURATION, f"{field} : papier ou grammage manquant",
                        block.id if block else None)
            return
        if block is not None and value is not None:
            papers = block.config.cover_print.papers if isinstance(block, SpringOptionsBlock) else block.config.papers
            if not paper_enabled(papers, value):
                self._error(res, ErrorKind.UNKNOWN_OPTION,
                            f"{field} : {value['paper']} {value['weight']}g non activé", block.id)
            return
        self._check_value(res, field, value and PaperChoice(**value), block, group, required)

    def _check_finishing(self, sel: Selection, res: Resolution,
                         fin: Optional[FinishingBlock], forced_crease: bool) -> None:
        f = sel.finishing
        if fin is None:
            if not f.is_empty():
                self._error(res, ErrorKind.UNKNOWN_OPTION, "Finitions sélectionnées sans bloc finition")
            return
        cfg = fin.config
        for flag in ("corner", "punch", "mising"):
            if getattr(f, flag) and not getattr(cfg, flag):
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"Finition {flag} non activée", fin.id)
        if f.coating:
            if not cfg.coating.enabled or f.coating_type not in cfg.coating.types:
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"Coating {f.coating_type!r} non activé", fin.id)
            elif f.coating_side is not None and f.coating_side not in cfg.coating.sides:
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"Coating {f.coating_side!r} non activé", fin.id)
        if f.fold_count and not (cfg.fold.enabled and f.fold_count in cfg.fold.options):
            self._error(res, ErrorKind.UNKNOWN_OPTION, f"Pli {f.fold_count} non activé", fin.id)
        if f.crease_count and not forced_crease and not (cfg.osi.enabled and f.crease_count in cfg.osi.options):
            self._error(res, ErrorKind.UNKNOWN_OPTION, f"Oshi {f.crease_count} non activé", fin.id)

    # ── Règles inter-blocs ──────────────────────────────────────────────────

    def _check_cover_source(self, sel: Selection, res: Resolution) -> None:
        pp_block, _ = self._simple_source("pp")
        cp_block, _ = self._simple_source("cover_print")
        if pp_block is None and cp_block is None:
            return
        if sel.pp in (None, NONE) and sel.cover_print in (None, NONE):
            block = pp_block or cp_block
            self._error(res, ErrorKind.MISSING_COVER_SOURCE,
                        "PP ou impression de couverture obligatoire", block.id)

    def _check_coating(self, sel: Selection, res: Resolution, fin: Optional[FinishingBlock]) -> None:
        if fin is None or not fin.config.coating.enabled:
            return
        coating = fin.config.coating
        weight = res.governing_weight
        if coating.weight_allowed(weight):
            return
        res.disabled_options.setdefault(fin.id, []).append("coating")
        if sel.finishing.coating:
            self._error(res, ErrorKind.COATING_WEIGHT_INELIGIBLE,
                        f"Coating impossible sur {weight}g (autorisé : {coating.range_label()})", fin.id)

    def _check_pages(self, sel: Selection, res: Resolution) -> None:
        pages = self.schema.pages_block()
        if pages is None:
            if sel.pages is not None and self.schema.product_type != "outsourced":
                self._error(res, ErrorKind.UNKNOWN_OPTION, f"pages : {sel.pages} sans bloc de pages")
            return
        if sel.pages is None:
            self._error(res, ErrorKind.UNRESOLVED_CONFIGURATION, "pages : valeur manquante", pages.id)
            return
        if not pages.config.accepts(sel.pages):
            self._error(res, ErrorKind.UNKNOWN_OPTION, f"pages : {sel.pages} hors plage", pages.id)
            return

        res.inner_pages = inner_page_count(sel.pages, pages.binding_type)
        if res.binding is None or not sel.inner_weight:
            return
        res.thickness = round(binding_thickness(
            res.binding, res.inner_pages, sel.inner_weight, sel.inner_paper,
            cover_weight=sel.cover_weight, cover_paper=sel.cover_paper,
            inner_side=sel.inner_side, catalog=self.catalog,
        ), 3)
        message = thickness_error(res.binding, res.thickness, pages.config.max_thickness)
        if message:
            self._error(res, ErrorKind.THICKNESS_EXCEEDED, message, pages.id)


def _show(value: Any) -> str:
    if isinstance(value, CamelModel):
        return repr(value.model_dump())
    return repr(value)
