"""
Blocs Pages / InnerLayer — nombre de pages et liens vers les blocs papier / impression.

Pages intérieures utilisées par les formules :
  saddle (piqûre) → total − 4 (les 4 pages de la couverture auto-portée)
  leaf   (dos carré collé, spirale) → total
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import (
    BaseBlock, BlockConfig, BlockId, CamelModel, PaperChoice, PrintChoice,
    paper_default_cleared, paper_enabled, toggle_paper,
)
from .printing import PRINT_FLAGS, PrintFlags

SADDLE_COVER_PAGES = 4


def inner_page_count(total: int, binding_type: str) -> int:
    if binding_type == "saddle":
        return max(0, total - SADDLE_COVER_PAGES)
    return total


class LinkedBlocks(CamelModel):
    cover_paper: Optional[BlockId] = None
    cover_print: Optional[BlockId] = None
    inner_paper: Optional[BlockId] = None
    inner_print: Optional[BlockId] = None

    def items(self):
        return [(role, getattr(self, role)) for role in
                ("cover_paper", "cover_print", "inner_paper", "inner_print")]


class PageRange(BlockConfig):
    min: int = 8
    max: int = 48
    step: int = 4
    max_thickness: Optional[float] = None

    def choice_count(self) -> Optional[int]:
        return None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        if value < self.min or value > self.max:
            return False
        return (value - self.min) % max(self.step, 1) == 0


class PagesConfig(PageRange):
    default: Optional[int] = 16
    binding_type: Literal["saddle", "leaf"] = "saddle"
    linked_blocks: LinkedBlocks = LinkedBlocks()


class PagesBlock(BaseBlock):
    type: Literal["pages", "pages_saddle", "pages_leaf"] = "pages"
    config: PagesConfig = PagesConfig()

    @property
    def binding_type(self) -> str:
        if self.type == "pages_saddle":
            return "saddle"
        if self.type == "pages_leaf":
            return "leaf"
        return self.config.binding_type


class InnerLayerConfig(PageRange, PrintFlags):
    """Bloc historique tout-en-un : papier + impression + pages du cahier intérieur."""
    papers: Dict[str, List[int]] = Field(default_factory=dict)
    default_paper: Optional[PaperChoice] = None
    default_print: Optional[PrintChoice] = PrintChoice()
    default_pages: Optional[int] = 16

    def option_codes(self) -> List[str]:
        papers = [f"{code}:{w}" for code, weights in self.papers.items() for w in weights]
        return papers + self.print_codes()

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        if group == "print" or (group is None and code in PRINT_FLAGS):
            self.toggle_print(code, enabled)
            if self.print_cleared(self.default_print):
                self.default_print = None
            return
        self.papers = toggle_paper(self.papers, code, enabled, weight, catalog)
        if not enabled and paper_default_cleared(self.default_paper, code, weight):
            self.default_paper = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        if group == "paper":
            return paper_enabled(self.papers, value)
        if group == "print":
            return self.accepts_print(value)
        return PageRange.accepts(self, value)

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        if not self.accepts(value, group):
            raise SchemaError(ErrorKind.INVALID_DEFAULT, f"Valeur par défaut {value!r} non activée")
        if group == "paper":
            self.default_paper = PaperChoice.model_validate(value)
        elif group == "print":
            self.default_print = PrintChoice.model_validate(value)
        else:
            self.default_pages = value

    def default_value(self) -> Any:
        return self.default_pages


class InnerLayerBlock(BaseBlock):
    type: Literal["inner_layer_saddle", "inner_layer_leaf"] = "inner_layer_leaf"
    config: InnerLayerConfig = InnerLayerConfig(
        papers={"mojo": [80, 100, 120], "snow": [100, 120, 150]},
        default_paper=PaperChoice(paper="mojo", weight=80),
        min=10, max=500, step=1, default_pages=50,
    )

    @property
    def binding_type(self) -> str:
        return "saddle" if self.type == "inner_layer_saddle" else "leaf"
