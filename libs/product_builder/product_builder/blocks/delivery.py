"""Bloc Delivery — délai de sortie + majoration / remise en pourcentage."""
from typing import Any, List, Literal, Optional

from pydantic import Field

from ..catalog import OptionCatalog
from ..errors import ErrorKind, SchemaError
from .base import BaseBlock, BlockConfig, CamelModel

# id → nombre de jours ouvrés (les ids sont figés)
DELIVERY_DAYS = {"same": 0, "next1": 1, "next2": 2, "next3": 3}


class DeliveryOption(CamelModel):
    id: str
    label: str = ""
    enabled: bool = True
    percent: float = 0
    deadline: str = "12:00"


def fixed_delivery_options() -> List[DeliveryOption]:
    return [
        DeliveryOption(id="same",  label="당일",    percent=30,  deadline="10:00"),
        DeliveryOption(id="next1", label="1영업일", percent=15),
        DeliveryOption(id="next2", label="2영업일", percent=0),
        DeliveryOption(id="next3", label="3영업일", percent=-5),
    ]


class DeliveryConfig(BlockConfig):
    options: List[DeliveryOption] = Field(default_factory=fixed_delivery_options)
    default: Optional[str] = "next2"

    def option(self, option_id: Optional[str]) -> Optional[DeliveryOption]:
        return next((o for o in self.options if o.id == option_id), None)

    def option_codes(self) -> List[str]:
        return [o.id for o in self.options if o.enabled]

    def percent(self, option_id: Optional[str]) -> float:
        opt = self.option(option_id)
        return opt.percent if opt and opt.enabled else 0

    def toggle(self, code: Any, enabled: bool, group: Optional[str] = None,
               weight: Optional[int] = None, catalog: Optional[OptionCatalog] = None) -> None:
        opt = self.option(code)
        if opt is None:
            raise SchemaError(ErrorKind.UNKNOWN_OPTION, f"Option de livraison inconnue : {code!r}")
        opt.enabled = enabled
        if not enabled and self.default == code:
            self.default = None

    def accepts(self, value: Any, group: Optional[str] = None) -> bool:
        return value in self.option_codes()


class DeliveryBlock(BaseBlock):
    type: Literal["delivery"] = "delivery"
    config: DeliveryConfig = DeliveryConfig()
