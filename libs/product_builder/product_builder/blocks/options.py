"""Blocs à liste simple : PP, impression de couverture, dos, couleur de spirale."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import BaseBlock, PaperChoice, paper_default_cleared, paper_enabled, toggle_paper
from .size import OptionListConfig

COVER_PRINT_OPTIONS = ("none", "front_only", "front_back")


class PPBlock(BaseBlock):
    type: Literal["pp"] = "pp"
    config: OptionListConfig = OptionListConfig(options=["clear", "frosted", "none"], default="clear")


class BackBlock(BaseBlock):
    type: Literal["back"] = "back"
    config: OptionListConfig = OptionListConfig(options=["white", "black", "none"], default="white")


class SpringColorBlock(BaseBlock):
    type: Literal["spring_color"] = "spring_color"
    config: OptionListConfig = OptionListConfig(options=["black", "white"], default="black")


class CoverPrintConfig(OptionListConfig):
    """none | front_only | front_back + papier de couverture (papier → grammages)."""
    papers: Dict[str, List[int]] = Field(default_factory=dict)
    default_paper: Optional[PaperChoice] = None

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        if group == "paper" or (group is None and code not in COVER_PRINT_OPTIONS):
            self.papers = toggle_paper(self.papers, code, enabled, weight, catalog)
            if not enabled and paper_default_cleared(self.default_paper, code, weight):
                self.default_paper = None
            return
        super().toggle(code, enabled)

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        if group == "paper":
            return paper_enabled(self.papers, value)
        return value in self.options

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        if group != "paper":
            return super().set_default(value, group)
        if not self.accepts(value, group):
            raise SchemaError(ErrorKind.INVALID_DEFAULT, f"Papier de couverture {value!r} non activé")
        self.default_paper = PaperChoice.model_validate(value)


class CoverPrintBlock(BaseBlock):
    type: Literal["cover_print"] = "cover_print"
    config: CoverPrintConfig = CoverPrintConfig(
        options=list(COVER_PRINT_OPTIONS),
        default="none",
        papers={"snow": [200, 250], "mojo": [150, 180]},
        default_paper=PaperChoice(paper="snow", weight=200),
    )
