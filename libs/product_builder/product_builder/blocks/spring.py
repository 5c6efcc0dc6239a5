"""
Bloc SpringOptions — regroupe PP, impression de couverture, dos et couleur de spirale.

Chaque groupe est une liste d'options {id, label, enabled, default}. Les opérations
du schéma ciblent un groupe : toggle("frosted", False, group="pp").
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import (
    BaseBlock, BlockConfig, CamelModel, PaperChoice,
    paper_default_cleared, paper_enabled, toggle_paper,
)

GROUPS = ("pp", "cover_print", "back", "spring_color")
_GROUP_ALIASES = {"coverPrint": "cover_print", "springColor": "spring_color"}


def group_name(group: Optional[str]) -> str:
    name = _GROUP_ALIASES.get(group or "", group)
    if name not in GROUPS:
        raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Groupe d'options spirale inconnu : {group!r}")
    return name


class SpringOption(CamelModel):
    id: str
    label: str = ""
    enabled: bool = True
    default: bool = False


class SpringGroup(CamelModel):
    enabled: bool = True
    options: List[SpringOption] = Field(default_factory=list)

    def enabled_ids(self) -> List[str]:
        if not self.enabled:
            return []
        return [o.id for o in self.options if o.enabled]

    def default_id(self) -> Optional[str]:
        ids = self.enabled_ids()
        return next((o.id for o in self.options if o.default and o.id in ids), None)

    def toggle(self, code: str, enabled: bool) -> None:
        option = next((o for o in self.options if o.id == code), None)
        if option is None:
            if not enabled:
                return
            option = SpringOption(id=code, label=code)
            self.options.append(option)
        option.enabled = enabled
        if not enabled:
            option.default = False

    def set_default(self, code: str) -> None:
        for o in self.options:
            o.default = o.id == code


class CoverPrintGroup(SpringGroup):
    papers: Dict[str, List[int]] = Field(default_factory=dict)
    default_paper: Optional[PaperChoice] = None


def _options(*pairs, default: str) -> List[SpringOption]:
    return [SpringOption(id=i, label=label, default=(i == default)) for i, label in pairs]


class SpringOptionsConfig(BlockConfig):
    pp: SpringGroup = SpringGroup(options=_options(
        ("clear", "투명"), ("frosted", "불투명"), ("none", "없음"), default="clear"))
    cover_print: CoverPrintGroup = CoverPrintGroup(
        options=_options(("none", "없음"), ("front_only", "앞표지만"), ("front_back", "앞뒤표지"),
                         default="none"),
        papers={"snow": [200, 250, 300], "mojo": [150, 180]},
        default_paper=PaperChoice(paper="snow", weight=200),
    )
    back: SpringGroup = SpringGroup(options=_options(
        ("white", "화이트"), ("black", "블랙"), ("none", "없음"), default="white"))
    spring_color: SpringGroup = SpringGroup(options=_options(
        ("black", "블랙"), ("white", "화이트"), default="black"))

    def group(self, group: Optional[str]) -> SpringGroup:
        return getattr(self, group_name(group))

    def option_codes(self) -> List[str]:
        return [f"{g}:{code}" for g in GROUPS for code in getattr(self, g).enabled_ids()]

    def choice_count(self) -> Optional[int]:
        return None

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        if group == "paper":
            cp = self.cover_print
            cp.papers = toggle_paper(cp.papers, code, enabled, weight, catalog)
            if not enabled and paper_default_cleared(cp.default_paper, code, weight):
                cp.default_paper = None
            return
        self.group(group).toggle(code, enabled)

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        if group == "paper":
            return paper_enabled(self.cover_print.papers, value)
        return value in self.group(group).enabled_ids()

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        if not self.accepts(value, group):
            raise SchemaError(ErrorKind.INVALID_DEFAULT, f"Valeur par défaut {value!r} non activée ({group})")
        if group == "paper":
            self.cover_print.default_paper = PaperChoice.model_validate(value)
        else:
            self.group(group).set_default(value)

    def default_value(self) -> Dict[str, Any]:
        return {g: getattr(self, g).default_id() for g in GROUPS}


class SpringOptionsBlock(BaseBlock):
    type: Literal["spring_options"] = "spring_options"
    config: SpringOptionsConfig = SpringOptionsConfig()
