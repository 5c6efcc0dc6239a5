"""Bloc Paper — config à deux niveaux : papier → grammages activés."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from .base import (
    BaseBlock, BlockConfig, PaperChoice,
    paper_default_cleared, paper_enabled, toggle_paper,
)


class PaperConfig(BlockConfig):
    papers: Dict[str, List[int]] = Field(default_factory=dict)
    default: Optional[PaperChoice] = None

    def option_codes(self) -> List[str]:
        return [f"{code}:{w}" for code, weights in self.papers.items() for w in weights]

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        self.papers = toggle_paper(self.papers, code, enabled, weight, catalog)
        if not enabled and paper_default_cleared(self.default, code, weight):
            self.default = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return paper_enabled(self.papers, value)

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        super().set_default(value, group)
        self.default = PaperChoice.model_validate(value)


class PaperBlock(BaseBlock):
    type: Literal["paper"] = "paper"
    config: PaperConfig = PaperConfig(
        papers={"snow": [120, 150], "mojo": [80, 100]},
        default=PaperChoice(paper="snow", weight=120),
    )
