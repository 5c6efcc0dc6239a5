"""Bloc Size — formats de sortie (a4, a5, b5…)."""
from typing import Any, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import BaseBlock, BlockConfig, toggle_in_list


class OptionListConfig(BlockConfig):
    """Liste plate d'options activées + un défaut (size, pp, back, spring_color)."""
    options: List[str] = Field(default_factory=list)
    default: Optional[str] = None

    def option_codes(self) -> List[str]:
        return list(self.options)

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        self.options = toggle_in_list(self.options, code, enabled)
        if not enabled and self.default == code:
            self.default = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return value in self.options


class SizeConfig(OptionListConfig):
    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        if enabled and catalog is not None and catalog.size(code) is None:
            raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Format inconnu : {code!r}")
        super().toggle(code, enabled)


class SizeBlock(BaseBlock):
    type: Literal["size"] = "size"
    config: SizeConfig = SizeConfig(options=["a4", "a5", "b5"], default="a4")
