"""Bloc Quantity — quantités proposées, quantité libre, seuil de devis, arrondi d'affichage."""
from typing import Any, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from .base import BaseBlock, BlockConfig, toggle_in_list


class QuantityConfig(BlockConfig):
    options: List[int] = Field(default_factory=lambda: [50, 100, 200, 500, 1000])
    default: Optional[int] = 100
    min: int = 10
    max: int = 5000
    allow_custom: bool = False
    show_unit_price: bool = True
    contact_threshold: int = 0           # 0 = désactivé
    contact_message: str = ""
    round_enabled: bool = False
    round_unit: int = 100
    round_method: Literal["floor", "ceil", "round"] = "floor"

    def option_codes(self) -> List[int]:
        return list(self.options)

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        self.options = toggle_in_list(self.options, int(code), enabled, keep_sorted=True)
        if not enabled and self.default == int(code):
            self.default = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return value in self.options or self.custom_allowed(value)

    def custom_allowed(self, qty: Any) -> bool:
        return self.allow_custom and isinstance(qty, int) and self.min <= qty <= self.max

    def contact_required(self, qty: int) -> bool:
        return self.contact_threshold > 0 and qty >= self.contact_threshold


class QuantityBlock(BaseBlock):
    type: Literal["quantity"] = "quantity"
    config: QuantityConfig = QuantityConfig()
