"""
Bloc Finishing — coating, oshi (crease), fold, corner rounding, punching, perforation (mising).

Groupes activables via toggle(code, enabled, group=...) :
  group=None       → corner | punch | mising | coating | osi | fold (interrupteurs)
  group="coating"  → matte | gloss | single | double
  group="osi"      → nombre de lignes d'oshi (1, 2, 3)
  group="fold"     → nombre de volets (2, 3, 4)
"""
from typing import Any, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import BaseBlock, BlockConfig, BlockId, CamelModel, toggle_in_list

COATING_TYPES = ("matte", "gloss")
COATING_SIDES = ("single", "double")
MIN_COATING_WEIGHT = 151          # ≤ 150 g : coating refusé
CREASE_WEIGHT_THRESHOLD = 130     # ≥ 130 g : un pli impose l'oshi


class CoatingConfig(CamelModel):
    enabled: bool = False
    types: List[str] = Field(default_factory=lambda: list(COATING_TYPES))
    sides: List[str] = Field(default_factory=lambda: list(COATING_SIDES))
    linked_paper: Optional[BlockId] = None
    min_weight: Optional[int] = MIN_COATING_WEIGHT
    max_weight: Optional[int] = None

    def weight_allowed(self, weight: Optional[int]) -> bool:
        if weight is None:
            return True
        if self.min_weight is not None and weight < self.min_weight:
            return False
        return self.max_weight is None or weight <= self.max_weight

    def range_label(self) -> str:
        if self.max_weight is None:
            return f"{self.min_weight}g et plus"
        return f"{self.min_weight or 0}~{self.max_weight}g"


class CountConfig(CamelModel):
    enabled: bool = False
    options: List[int] = Field(default_factory=list)


class FinishingDefault(CamelModel):
    coating: bool = False
    coating_type: Optional[str] = None
    coating_side: Optional[str] = None
    corner: bool = False
    punch: bool = False
    mising: bool = False
    osi: Optional[int] = None
    fold: Optional[int] = None


class FinishingConfig(BlockConfig):
    corner: bool = False
    punch: bool = False
    mising: bool = False
    coating: CoatingConfig = CoatingConfig()
    osi: CountConfig = CountConfig()
    fold: CountConfig = CountConfig()
    crease_weight_threshold: int = CREASE_WEIGHT_THRESHOLD
    default: FinishingDefault = FinishingDefault()

    def option_codes(self) -> List[str]:
        codes = [c for c in ("corner", "punch", "mising") if getattr(self, c)]
        if self.coating.enabled and self.coating.types:
            codes.append("coating")
        for group in ("osi", "fold"):
            cfg = getattr(self, group)
            if cfg.enabled and cfg.options:
                codes.append(group)
        return codes

    def choice_count(self) -> Optional[int]:
        return None

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        if group is None:
            if code in ("corner", "punch", "mising"):
                setattr(self, code, enabled)
            elif code in ("coating", "osi", "fold"):
                getattr(self, code).enabled = enabled
            else:
                raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Finition inconnue : {code!r}")
        elif group == "coating":
            if code in COATING_TYPES:
                self.coating.types = toggle_in_list(self.coating.types, code, enabled)
            elif code in COATING_SIDES:
                self.coating.sides = toggle_in_list(self.coating.sides, code, enabled)
            else:
                raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Type de coating inconnu : {code!r}")
        elif group in ("osi", "fold"):
            cfg = getattr(self, group)
            cfg.options = toggle_in_list(cfg.options, int(code), enabled, keep_sorted=True)
        else:
            raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Groupe de finition inconnu : {group!r}")
        if not enabled and not self.accepts(self.default):
            self.default = FinishingDefault()

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        if isinstance(value, dict):
            value = FinishingDefault.model_validate(value)
        if not isinstance(value, FinishingDefault):
            return False
        if any(getattr(value, c) and not getattr(self, c) for c in ("corner", "punch", "mising")):
            return False
        if value.coating:
            if not self.coating.enabled:
                return False
            if value.coating_type not in self.coating.types:
                return False
            if value.coating_side is not None and value.coating_side not in self.coating.sides:
                return False
        for group in ("osi", "fold"):
            count = getattr(value, group)
            cfg = getattr(self, group)
            if count and not (cfg.enabled and count in cfg.options):
                return False
        return True

    def set_default(self, value: Any, group: Optional[str] = None) -> None:
        super().set_default(value, group)
        self.default = FinishingDefault.model_validate(value)


class FinishingBlock(BaseBlock):
    type: Literal["finishing"] = "finishing"
    optional: bool = True
    config: FinishingConfig = FinishingConfig(corner=True, punch=True)
