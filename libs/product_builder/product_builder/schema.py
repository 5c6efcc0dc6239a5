"""
BlockSchema — liste ordonnée de blocs d'un produit (colonne JSON par produit).

Les liens entre blocs sont des ids ; ils sont résolus à l'évaluation via block(),
qui échoue bruyamment sur un id orphelin.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional

from pydantic import Field

from .blocks import (
    BlockUnion, CoverPrintBlock, FinishingBlock, InnerLayerBlock, PagesBlock, PaperBlock,
    PrintBlock, SizeBlock, SpringOptionsBlock,
)
from .blocks.base import BaseBlock, CamelModel
from .catalog import OptionCatalog
from .errors import ErrorKind, SchemaError, UnresolvedConfiguration, ValidationIssue

log = logging.getLogger(__name__)

PRODUCT_TYPES   = ("flyer", "leaflet", "postcard", "saddle", "perfect", "spring", "outsourced")
BINDING_TYPES   = ("saddle", "perfect", "spring")

# rôle du lien → type de bloc attendu
_LINK_TYPES = {
    "cover_paper": ("paper",),
    "inner_paper": ("paper",),
    "cover_print": ("print",),
    "inner_print": ("print",),
}


class QtyDiscount(CamelModel):
    min_qty: int
    percent: float


class OutsourcedConfig(CamelModel):
    """Produit sous-traité : prix à la page + forfait reliure, remise par quantité."""
    page_price: int = 40
    binding_fee: int = 1500
    default_pages: int = 100
    qty_discounts: List[QtyDiscount] = Field(default_factory=list)

    def discount(self, qty: int) -> float:
        applicable = [d for d in self.qty_discounts if qty >= d.min_qty]
        return max(applicable, key=lambda d: d.min_qty).percent if applicable else 0


class BlockSchema(CamelModel):
    product_type: str = "flyer"
    blocks: List[BlockUnion] = Field(default_factory=list)
    outsourced: Optional[OutsourcedConfig] = None

    # ── Accès ───────────────────────────────────────────────────────────────

    def get(self, block_id: Any) -> Optional[BaseBlock]:
        block_id = str(block_id)
        return next((b for b in self.blocks if b.id == block_id), None)

    def block(self, block_id: Any) -> BaseBlock:
        block = self.get(block_id)
        if block is None:
            raise UnresolvedConfiguration(
                f"Bloc {block_id} introuvable",
                [ValidationIssue(kind=ErrorKind.UNRESOLVED_CONFIGURATION,
                                 message=f"Bloc {block_id} introuvable",
                                 affected_block_id=str(block_id))],
            )
        return block

    def active_blocks(self) -> Iterator[BaseBlock]:
        return (b for b in self.blocks if b.on)

    def first(self, *classes) -> Optional[BaseBlock]:
        return next((b for b in self.active_blocks() if isinstance(b, classes)), None)

    def pages_block(self):
        return self.first(PagesBlock, InnerLayerBlock)

    def finishing_block(self) -> Optional[FinishingBlock]:
        return self.first(FinishingBlock)

    @property
    def binding(self) -> Optional[str]:
        """saddle | perfect | spring — None pour un produit feuille."""
        if self.product_type in BINDING_TYPES:
            return self.product_type
        if self.product_type == "outsourced":
            return None
        pages = self.pages_block()
        if pages is None:
            return None
        return "saddle" if pages.binding_type == "saddle" else "perfect"

    def links(self) -> Dict[str, Optional[str]]:
        pages = self.pages_block()
        if not isinstance(pages, PagesBlock):
            return {}
        return dict(pages.config.linked_blocks.items())

    def paper_role(self, block_id: str) -> str:
        """main | cover | inner — selon les liens du bloc pages."""
        links = self.links()
        if links.get("cover_paper") == block_id:
            return "cover"
        if links.get("inner_paper") == block_id:
            return "inner"
        return "main"

    def print_role(self, block_id: str) -> str:
        links = self.links()
        if links.get("cover_print") == block_id:
            return "cover"
        if links.get("inner_print") == block_id:
            return "inner"
        return "main"

    # ── Édition (admin) ─────────────────────────────────────────────────────

    def enable_option(
        self,
        block_id: Any,
        code: Any,
        enabled: bool = True,
        group: Optional[str] = None,
        weight: Optional[int] = None,
        catalog: Optional[OptionCatalog] = None,
    ) -> BaseBlock:
        """
        Active / désactive une option du bloc. Le défaut est effacé s'il vient d'être
        désactivé ; un bloc réduit à un seul choix est verrouillé.
        """
        block = self.block(block_id)
        try:
            block.config.toggle(code, enabled, group=group, weight=weight, catalog=catalog)
        except SchemaError as e:
            e.block_id = block.id
            for issue in e.issues:
                issue.affected_block_id = block.id
            raise
        if block.config.choice_count() == 1 and not block.locked:
            block.locked = True
            log.info("Bloc %s verrouillé : une seule option restante", block.id)
        return block

    def set_default(self, block_id: Any, value: Any, group: Optional[str] = None) -> BaseBlock:
        block = self.block(block_id)
        try:
            block.config.set_default(value, group)
        except SchemaError as e:
            e.block_id = block.id
            for issue in e.issues:
                issue.affected_block_id = block.id
            raise
        return block

    # ── Validation à l'enregistrement ───────────────────────────────────────

    def validate_schema(self, catalog: Optional[OptionCatalog] = None) -> List[ValidationIssue]:
        """Erreurs d'édition : ids dupliqués, défauts non activés, liens orphelins, options inconnues."""
        issues: List[ValidationIssue] = []

        def add(kind: ErrorKind, message: str, block_id: Optional[str] = None) -> None:
            issues.append(ValidationIssue(kind=kind, message=message, affected_block_id=block_id))

        if self.product_type not in PRODUCT_TYPES:
            add(ErrorKind.UNKNOWN_OPTION, f"Type de produit inconnu : {self.product_type!r}")

        seen = set()
        for b in self.blocks:
            if b.id in seen:
                add(ErrorKind.UNRESOLVED_CONFIGURATION, f"Id de bloc dupliqué : {b.id}", b.id)
            seen.add(b.id)

        for b in self.blocks:
            for group, value in _default_pairs(b):
                if value is not None and not b.config.accepts(value, group):
                    add(ErrorKind.INVALID_DEFAULT, f"Défaut {_show(value)} non activé sur « {b.label or b.type} »", b.id)
            if catalog is not None:
                for message in _unknown_catalog_options(b, catalog):
                    add(ErrorKind.UNKNOWN_OPTION, message, b.id)

        issues.extend(self.link_issues())
        return issues

    def link_issues(self) -> List[ValidationIssue]:
        """Liens non résolus — bloquants pour un produit relié."""
        issues = []
        pages = self.pages_block()

        fin = self.finishing_block()
        if fin is not None and fin.config.coating.linked_paper:
            target = self.get(fin.config.coating.linked_paper)
            if target is None or not isinstance(target, (PaperBlock, InnerLayerBlock)):
                issues.append(ValidationIssue(
                    kind=ErrorKind.UNRESOLVED_CONFIGURATION,
                    message=f"Papier lié au coating introuvable : {fin.config.coating.linked_paper}",
                    affected_block_id=fin.id,
                ))

        if self.binding is None:
            return issues
        if pages is None:
            issues.append(ValidationIssue(
                kind=ErrorKind.UNRESOLVED_CONFIGURATION,
                message="Produit relié sans bloc de pages",
            ))
            return issues
        if isinstance(pages, InnerLayerBlock):
            return issues

        required = ("inner_paper", "inner_print")
        for role, target_id in pages.config.linked_blocks.items():
            if target_id is None:
                if role in required:
                    issues.append(ValidationIssue(
                        kind=ErrorKind.UNRESOLVED_CONFIGURATION,
                        message=f"Lien {role} manquant sur le bloc pages",
                        affected_block_id=pages.id,
                    ))
                continue
            target = self.get(target_id)
            if target is None or not target.on or target.type not in _LINK_TYPES[role]:
                issues.append(ValidationIssue(
                    kind=ErrorKind.UNRESOLVED_CONFIGURATION,
                    message=f"Lien {role} → bloc {target_id} non résolu",
                    affected_block_id=pages.id,
                ))
        return issues

    def check(self, catalog: Optional[OptionCatalog] = None) -> "BlockSchema":
        """Lève SchemaError (toutes les anomalies jointes) si le schéma est invalide."""
        issues = self.validate_schema(catalog)
        if issues:
            raise SchemaError.from_issues(issues)
        return self


def _show(value: Any) -> str:
    if isinstance(value, CamelModel):
        return repr(value.model_dump())
    return repr(value)


def _default_pairs(block: BaseBlock):
    cfg = block.config
    if isinstance(block, CoverPrintBlock):
        return [(None, cfg.default), ("paper", cfg.default_paper)]
    if isinstance(block, InnerLayerBlock):
        return [(None, cfg.default_pages), ("paper", cfg.default_paper), ("print", cfg.default_print)]
    if isinstance(block, SpringOptionsBlock):
        return [("paper", cfg.cover_print.default_paper)]
    return [(None, cfg.default_value())]


def _paper_maps(block: BaseBlock) -> List[Dict[str, List[int]]]:
    cfg = block.config
    if isinstance(block, (PaperBlock, CoverPrintBlock, InnerLayerBlock)):
        return [cfg.papers]
    if isinstance(block, SpringOptionsBlock):
        return [cfg.cover_print.papers]
    return []


def _unknown_catalog_options(block: BaseBlock, catalog: OptionCatalog) -> List[str]:
    messages = []
    if isinstance(block, SizeBlock):
        messages += [f"Format inconnu : {code}" for code in block.config.options if catalog.size(code) is None]
    for papers in _paper_maps(block):
        for code, weights in papers.items():
            if catalog.paper(code) is None:
                messages.append(f"Papier inconnu : {code}")
                continue
            known = catalog.paper_weights(code)
            messages += [f"Grammage inconnu : {code} {w}g" for w in weights if w not in known]
    return messages
